"""
Substance Catalog Tests

Validates catalog consistency, dissociation-constant relationships and
the display helpers.
"""

import dataclasses

import pytest

from acid_base_sim.core.substances import (
    ALL_SUBSTANCES,
    HYDROGEN_CHLORIDE,
    PKW,
    SODIUM_HYDROXIDE,
    STRONG_ACIDS,
    WATER_DISSOCIATION_CONSTANT,
    WEAK_ACID_HA,
    WEAK_BASE_B,
    PrimaryIon,
    SubstanceType,
    charged_ion_symbol,
    get_substance,
    ph_color,
    primary_ion_symbol,
    substances_by_type,
    titrant_for,
    validate_substances,
)


@pytest.mark.parametrize("substance", ALL_SUBSTANCES, ids=lambda s: s.id)
def test_catalog_entries_validate(substance):
    substance.validate()
    assert substance.concentration_at_max_substance > 0


@pytest.mark.parametrize(
    "substance", [s for s in ALL_SUBSTANCES if not s.is_strong], ids=lambda s: s.id
)
def test_weak_constants_are_conjugate(substance):
    assert substance.ka * substance.kb == pytest.approx(WATER_DISSOCIATION_CONSTANT)
    assert substance.pka + substance.pkb == pytest.approx(PKW)


def test_strong_electrolytes_show_no_neutral_molecules():
    for substance in ALL_SUBSTANCES:
        if substance.is_strong:
            assert substance.substance_added_per_ion == 0
            assert substance.pka == 0.0


def test_primary_ion_follows_family():
    assert HYDROGEN_CHLORIDE.primary_ion is PrimaryIon.HYDROGEN
    assert SODIUM_HYDROXIDE.primary_ion is PrimaryIon.HYDROXIDE
    assert primary_ion_symbol(WEAK_ACID_HA) == "H⁺"
    assert primary_ion_symbol(WEAK_BASE_B) == "OH⁻"


def test_substance_type_flags():
    assert SubstanceType.WEAK_ACID.is_acid and not SubstanceType.WEAK_ACID.is_strong
    assert SubstanceType.STRONG_BASE.is_strong and not SubstanceType.STRONG_BASE.is_acid


def test_reference_weak_acid():
    assert WEAK_ACID_HA.ka == 7.24e-5
    assert WEAK_ACID_HA.substance_added_per_ion == 2
    assert WEAK_ACID_HA.concentration_at_max_substance == pytest.approx(0.05)


def test_lookup():
    assert get_substance("HCl") is HYDROGEN_CHLORIDE
    assert get_substance("nope") is None
    assert substances_by_type(SubstanceType.STRONG_ACID) == STRONG_ACIDS


def test_lookup_returns_copy_of_family_list():
    family = substances_by_type(SubstanceType.STRONG_ACID)
    family.clear()
    assert substances_by_type(SubstanceType.STRONG_ACID)


def test_substance_is_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        WEAK_ACID_HA.ka = 1.0


def test_invalid_record_rejected():
    broken = dataclasses.replace(HYDROGEN_CHLORIDE, substance_added_per_ion=2)
    with pytest.raises(ValueError):
        broken.validate()

    negative = dataclasses.replace(WEAK_ACID_HA, ka=-1.0)
    with pytest.raises(ValueError):
        negative.validate()


def test_titrants():
    assert titrant_for(WEAK_ACID_HA).id == "KOH"
    assert titrant_for(HYDROGEN_CHLORIDE).id == "KOH"
    assert titrant_for(WEAK_BASE_B).id == "HCl"
    assert titrant_for(SODIUM_HYDROXIDE).is_acid


@pytest.mark.parametrize(
    "ion,expected", [("Cl", "Cl⁻"), ("Na", "Na⁺"), ("HB", "HB⁺"), ("B", "B"), ("Xe", "Xe")]
)
def test_charged_ion_symbol(ion, expected):
    assert charged_ion_symbol(ion) == expected


def test_ph_color_scale_boundaries():
    assert ph_color(1.0) == "#FF3B30"
    assert ph_color(7.0) == "#34C759"
    assert ph_color(13.0) == "#AF52DE"
    assert ph_color(2.0) != ph_color(1.99)


def test_validate_substances(capsys):
    validate_substances()
    assert "substance validations passed" in capsys.readouterr().out
