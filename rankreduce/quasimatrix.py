# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Callable
from dataclasses import dataclass

from .backend import ArrayLike, ArrayNamespace, shape
from .domain import Domain

@dataclass(frozen=True, kw_only=True)
class Quasimatrix[T: ArrayLike]:
    """
    Matrix with a continuous row dimension and ncols columns. Column k is a function
    on the domain, columns(t) returns all columns sampled at the points t with shape
    (len(t), ncols).
    """

    xp: ArrayNamespace[T]
    domain: Domain
    columns: Callable[[T], T]
    ncols: int

    def __call__(self, t: T) -> T:
        vals = self.columns(t)
        if shape(vals) != (shape(t)[0], self.ncols):
            raise ValueError(f"Quasimatrix columns returned shape {shape(vals)}, "
                             f"expected ({shape(t)[0]}, {self.ncols}).")
        return vals
