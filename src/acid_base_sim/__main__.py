"""
Command-Line Entry Point
========================

Headless reports from the simulation engine:

    python -m acid_base_sim ph --substance HA --molarity 0.05
    python -m acid_base_sim titrate --substance HCl --max-volume 50 [--plot]
    python -m acid_base_sim buffer --substance HA --particles 40
    python -m acid_base_sim beaker --substance HF --steps 5
    python -m acid_base_sim validate

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import argparse
import logging
import sys

from . import run_all_validations
from .config import GridConfig
from .core import (
    ALL_SUBSTANCES,
    BufferSaltModel,
    BufferStrongAdditionModel,
    Substance,
    calculate_equivalence_volume,
    calculate_pH,
    generate_titration_curve,
    get_species_counts,
    get_species_fractions,
    get_substance,
    titrant_for,
)
from .particles import (
    ManualScheduler,
    MoleculeType,
    ParticleAnimator,
    ParticleCounts,
    ReactingBeakerModel,
    ReactionColors,
    ReactionRule,
    SpeciesColors,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def resolve_substance(substance_id: str) -> Substance:
    substance = get_substance(substance_id)
    if substance is None:
        known = ", ".join(s.id for s in ALL_SUBSTANCES)
        raise ValueError(f"Unknown substance '{substance_id}' (known: {known})")
    return substance


def species_colors(substance: Substance) -> SpeciesColors:
    return SpeciesColors(
        substance=substance.color,
        primary_ion=substance.primary_color,
        secondary_ion=substance.secondary_color,
    )


def report_ph(args) -> None:
    substance = resolve_substance(args.substance)
    molarity = max(1e-10, args.molarity)

    pH = calculate_pH(substance, molarity)
    fractions = get_species_fractions(substance, molarity)
    counts = get_species_counts(substance, molarity, args.particles)

    logger.info(f"{substance.symbol} at {molarity:.4g} M")
    logger.info(f"  pH = {max(0.0, min(14.0, pH)):.3f}")
    logger.info(f"  ionized fraction = {fractions['ionized']:.4f}")
    logger.info(
        f"  particles: substance={counts.substance} "
        f"primary={counts.primary} secondary={counts.secondary}"
    )


def report_titration(args) -> None:
    substance = resolve_substance(args.substance)
    titrant = titrant_for(substance)

    v_eq = calculate_equivalence_volume(args.molarity, args.volume, args.titrant_molarity)
    curve = generate_titration_curve(
        substance,
        args.molarity,
        args.volume,
        args.titrant_molarity,
        args.max_volume,
        samples=args.samples,
    )

    logger.info(f"Titrating {args.volume} of {substance.symbol} with {titrant.symbol}")
    logger.info(f"  equivalence volume = {v_eq:.3f}")
    step = max(1, len(curve) // 10)
    for point in curve[::step]:
        logger.info(f"  V={point.volume:8.3f}  pH={point.ph:6.3f}")

    if args.plot:
        import matplotlib.pyplot as plt

        plt.plot([p.volume for p in curve], [p.ph for p in curve])
        plt.axvline(v_eq, linestyle="--")
        plt.xlabel(f"{titrant.symbol} added")
        plt.ylabel("pH")
        plt.title(f"{substance.symbol} titration")
        plt.ylim(0, 14)
        plt.show()


def report_buffer(args) -> None:
    substance = resolve_substance(args.substance)
    total_slots = GridConfig().total_slots

    model = BufferSaltModel.for_substance(substance, args.particles, total_slots)
    logger.info(
        f"{substance.symbol} buffer: {args.particles} particles in {total_slots} slots, "
        f"max salt = {model.max_substance}"
    )

    for salt in range(0, max(1, model.max_substance) + 1, args.salt_step):
        c = model.get_concentrations(salt)
        logger.info(
            f"  salt={salt:3d}  [sub]={c.substance:.4f}  [pri]={c.primary:.4f}  "
            f"[sec]={c.secondary:.4f}  pH={model.get_pH(salt):.3f}"
        )

    if model.max_substance > 0:
        strong = BufferStrongAdditionModel(substance, model, max_added=args.particles / 2)
        logger.info(f"  after strong addition: pH={strong.get_pH(strong.max_added):.3f}")


def run_beaker(args) -> None:
    substance = resolve_substance(args.substance)
    colors = species_colors(substance)

    scheduler = ManualScheduler()
    model = ReactingBeakerModel(
        animator=ParticleAnimator(scheduler=scheduler, clock=scheduler.clock_ms)
    )
    model.set_water_level(args.rows)

    for step in range(1, args.steps + 1):
        molarity = substance.concentration_at_max_substance * step / args.steps
        counts = get_species_counts(substance, molarity, args.particles)
        diff = model.update_particles(
            ParticleCounts(counts.substance, counts.primary, counts.secondary), colors
        )
        scheduler.run_pending()
        logger.info(
            f"step {step}: {model.counts()} "
            f"(added={len(diff.added)}, transmuted={len(diff.transmuted)}, "
            f"removed={len(diff.removed)})"
        )

    if not substance.is_strong:
        rule = ReactionRule(
            reactant=MoleculeType.SECONDARY_ION,
            reacting_with=MoleculeType.PRIMARY_ION,
            producing=MoleculeType.SUBSTANCE,
        )
        diff = model.add_with_reaction(
            rule,
            args.salt,
            ReactionColors(
                reactant=substance.secondary_color,
                reacting_with=substance.primary_color,
                produced=substance.color,
            ),
        )
        scheduler.run_pending()
        logger.info(
            f"salt x{args.salt}: {model.counts()} (reacted={len(diff.transmuted)})"
        )

    if not model.is_consistent():
        raise RuntimeError("Grid occupancy out of sync with particles")


def main():
    parser = argparse.ArgumentParser(description="Acid/Base Simulation Engine")
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    ph = sub.add_parser("ph", help="pH and species of a dissolved substance")
    ph.add_argument("--substance", default="HCl", help="Catalog id")
    ph.add_argument("--molarity", type=float, default=0.1, help="Molarity [mol/L]")
    ph.add_argument("--particles", type=int, default=50, help="Particle budget")
    ph.set_defaults(handler=report_ph)

    titrate = sub.add_parser("titrate", help="Titration curve")
    titrate.add_argument("--substance", default="HCl", help="Catalog id")
    titrate.add_argument("--molarity", type=float, default=0.1)
    titrate.add_argument("--volume", type=float, default=25.0, help="Beaker volume")
    titrate.add_argument("--titrant-molarity", type=float, default=0.1)
    titrate.add_argument("--max-volume", type=float, default=50.0)
    titrate.add_argument("--samples", type=int, default=101)
    titrate.add_argument("--plot", action="store_true", help="Plot with matplotlib")
    titrate.set_defaults(handler=report_titration)

    buffer = sub.add_parser("buffer", help="Salt-addition phase of a buffer")
    buffer.add_argument("--substance", default="HA", help="Weak acid or base id")
    buffer.add_argument("--particles", type=int, default=40)
    buffer.add_argument("--salt-step", type=int, default=5)
    buffer.set_defaults(handler=report_buffer)

    beaker = sub.add_parser("beaker", help="Run the particle beaker headless")
    beaker.add_argument("--substance", default="HA", help="Catalog id")
    beaker.add_argument("--particles", type=int, default=60)
    beaker.add_argument("--rows", type=float, default=11.0, help="Visible rows")
    beaker.add_argument("--steps", type=int, default=5)
    beaker.add_argument("--salt", type=int, default=10)
    beaker.set_defaults(handler=run_beaker)

    validate = sub.add_parser("validate", help="Run the validation suite")
    validate.set_defaults(handler=lambda args: run_all_validations())

    args = parser.parse_args()
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        args.handler(args)
    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        sys.exit(2)
    except Exception as e:
        logger.error(f"Simulation error: {type(e).__name__}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
