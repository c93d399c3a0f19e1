"""
Equation Primitives
===================

Composable scalar functions f: ℝ → ℝ used to build the piecewise
concentration curves of the buffer model.

- ConstantEquation: f(x) = v
- LinearEquation:   line through (x1, y1) and (x2, y2), unclamped
- SwitchingEquation: left(x) for x < threshold, right(x) otherwise

A SwitchingEquation stitches two physical regimes (e.g. "H⁺ being
consumed" and "H⁺ exhausted") into one function with a kink at the
regime boundary.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

from abc import ABC, abstractmethod


class Equation(ABC):
    """Scalar function of one variable."""

    @abstractmethod
    def get_value(self, x: float) -> float:
        """Evaluate the equation at x."""

    def __call__(self, x: float) -> float:
        return self.get_value(x)


class ConstantEquation(Equation):
    """Returns the same value regardless of x."""

    def __init__(self, value: float):
        self.value = value

    def get_value(self, x: float) -> float:
        return self.value

    def __repr__(self) -> str:
        return f"ConstantEquation({self.value!r})"


class LinearEquation(Equation):
    """
    Line through (x1, y1) and (x2, y2).

    y = slope * x + intercept

    No clamping is applied: callers own the domain bounds. A vertical
    definition (x1 == x2) degrades to the constant y1.
    """

    def __init__(self, x1: float, y1: float, x2: float, y2: float):
        if x2 == x1:
            self.slope = 0.0
            self.intercept = y1
        else:
            self.slope = (y2 - y1) / (x2 - x1)
            self.intercept = y1 - self.slope * x1

    def get_value(self, x: float) -> float:
        return self.slope * x + self.intercept

    def __repr__(self) -> str:
        return f"LinearEquation(slope={self.slope!r}, intercept={self.intercept!r})"


class SwitchingEquation(Equation):
    """
    Piecewise function switching between two equations at a threshold.

    - x < threshold: left equation
    - x >= threshold: right equation
    """

    def __init__(self, threshold: float, left: Equation, right: Equation):
        self.threshold = threshold
        self.left = left
        self.right = right

    def get_value(self, x: float) -> float:
        if x < self.threshold:
            return self.left.get_value(x)
        return self.right.get_value(x)

    @classmethod
    def linear(
        cls,
        threshold: float,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        final_value: float,
    ) -> "SwitchingEquation":
        """Linear segment up to the threshold, constant afterwards."""
        return cls(
            threshold,
            LinearEquation(x1, y1, x2, y2),
            ConstantEquation(final_value),
        )


def validate_equations() -> None:
    """Check the three primitives on known points."""
    assert ConstantEquation(3.5).get_value(-100.0) == 3.5

    line = LinearEquation(0.0, 1.0, 2.0, 5.0)
    assert abs(line(1.0) - 3.0) < 1e-12, "Midpoint of line incorrect"
    assert abs(line(4.0) - 9.0) < 1e-12, "Line must extrapolate without clamping"

    flat = LinearEquation(1.0, 2.0, 1.0, 7.0)
    assert flat(10.0) == 2.0, "Vertical definition should give constant y1"

    step = SwitchingEquation.linear(5.0, 0.0, 0.0, 5.0, 10.0, 10.0)
    assert abs(step(4.0) - 8.0) < 1e-12
    assert step(5.0) == 10.0 and step(50.0) == 10.0

    print("✓ All equation validations passed")
