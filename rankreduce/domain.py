# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from dataclasses import dataclass

class Domain:
    """Domain of a variable, defined by a lower and upper bound."""

    _lower: float
    _upper: float
    _diff: float

    @property
    def lower(self) -> float:
        return self._lower

    @property
    def upper(self) -> float:
        return self._upper

    @property
    def diff(self) -> float:
        return self._diff

    @property
    def center(self) -> float:
        return 0.5 * (self._lower + self._upper)

    def __init__(self, lower: float, upper: float):
        if lower >= upper:
            raise ValueError("Upper bound must be greater than lower bound")
        self._lower = float(lower)
        self._upper = float(upper)
        self._diff = self._upper - self._lower

    def clip(self, lower: float, upper: float) -> "Domain":
        """Intersection with [lower, upper]. The intersection must not be empty."""
        return Domain(max(lower, self._lower), min(upper, self._upper))

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Domain)\
               and self.lower == other.lower\
               and self.upper == other.upper

    def __hash__(self) -> int:
        return hash((self._lower, self._upper))

    def __str__(self) -> str:
        return f"Domain({self.lower}, {self.upper})"

    __repr__ = __str__

@dataclass(frozen=True)
class Rectangle:
    """
    Tensor product of two domains. The first domain belongs to the first
    variable x of a bivariate function f(x, y), the second to y.
    """

    xdomain: Domain
    ydomain: Domain

    @property
    def is_square(self) -> bool:
        """True if both variables live on the same interval."""
        return self.xdomain == self.ydomain

    def clip(self, x: tuple[float, float], y: tuple[float, float]) -> "Rectangle":
        return Rectangle(self.xdomain.clip(*x), self.ydomain.clip(*y))

    def __str__(self) -> str:
        return f"Rectangle({self.xdomain}, {self.ydomain})"
