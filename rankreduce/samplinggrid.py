# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Sequence, overload
from dataclasses import dataclass

from .backend import ArrayLike, ArrayNamespace, get_float_dtype
from .domain import Domain, Rectangle
from .utils import check_at_least

@dataclass(frozen=True, init=False)
class SamplingGrid[T: ArrayLike]:

    """
    Uniformly spaced two-dimensional grid on a rectangle. The grid is used to sample
    bivariate functions during the pivot search of the separable approximation.
    Its resolution decides which features of a function can be resolved, too coarse
    grids miss maxima and lead to more terms than necessary.
    """

    #-------------------------------------------------------------------------
    #members & properties

    rectangle: Rectangle
    sizes: tuple[int, int]
    spacings: tuple[float, float]

    @property
    def domains(self) -> tuple[Domain, Domain]:
        return self.rectangle.xdomain, self.rectangle.ydomain

    #-------------------------------------------------------------------------
    #constructor

    @overload
    def __init__(self, rectangle: Rectangle, size: int, /) -> None: ...
    @overload
    def __init__(self, rectangle: Rectangle, sizes: Sequence[int], /) -> None: ...
    # implementation
    def __init__(
            self,
            rectangle: Rectangle,
            sizes: int | Sequence[int], /
            ) -> None:
        if isinstance(sizes, int):
            sizes = (sizes, sizes)
        if len(sizes) != 2:
            raise ValueError("A sampling grid needs exactly one size per variable.")
        for size in sizes:
            check_at_least("Grid size", size, 2)
        object.__setattr__(self, "rectangle", rectangle)
        object.__setattr__(self, "sizes", (int(sizes[0]), int(sizes[1])))
        spacings = tuple(domain.diff / (size-1) for domain, size in zip(self.domains, self.sizes))
        object.__setattr__(self, "spacings", spacings)

    #-------------------------------------------------------------------------
    #methods

    def axes(self, xp: ArrayNamespace[T]) -> tuple[T, T]:
        """Coordinates of the grid lines along x and y."""
        dtype = get_float_dtype(xp)
        return tuple(xp.linspace(domain.lower, domain.upper, num=size, dtype=dtype)
                     for domain, size in zip(self.domains, self.sizes)) # type: ignore

    def patch(self, x: float, y: float, size: int, scale: float = 1.0) -> "SamplingGrid[T]":
        """
        Finer grid of size x size points covering the cells around (x, y). The patch spans
        scale grid spacings in every direction and is clipped to the rectangle.
        """
        hx, hy = scale * self.spacings[0], scale * self.spacings[1]
        rect = self.rectangle.clip((x-hx, x+hx), (y-hy, y+hy))
        return SamplingGrid(rect, size)

    def __str__(self) -> str:
        return f"SamplingGrid({self.rectangle}, sizes={self.sizes})"
