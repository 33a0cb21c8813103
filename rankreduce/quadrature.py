# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Callable, Optional, Protocol
from dataclasses import dataclass
import numpy as np

from .backend import ArrayLike, ArrayNamespace, get_float_dtype
from .domain import Domain
from .utils import check_pos

class Quadrature(Protocol):
    """Protocol for a one-dimensional quadrature rule."""

    npoints: int

    def nodes_weights(self, xp: ArrayNamespace, domain: Domain, /) -> tuple[ArrayLike, ArrayLike]:
        """Return nodes and weights such that sum(w * g(nodes)) approximates the integral of g over domain."""
        ...

    def refined(self) -> "Quadrature":
        """Return a rule of the same kind with more nodes."""
        ...

@dataclass(kw_only=True)
class GaussLegendre:
    """
    Gauss-Legendre quadrature with npoints nodes. Integrates polynomials up to degree
    2*npoints-1 exactly. Nodes and weights are computed once per point count with numpy
    and transferred to the requested namespace.
    """

    npoints: int = 128

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "npoints":
            check_pos(name, value)
        super().__setattr__(name, value)

    def nodes_weights[T: ArrayLike](self, xp: ArrayNamespace[T], domain: Domain) -> tuple[T, T]:
        nodes, weights = _leggauss(self.npoints)
        half = 0.5 * domain.diff
        dtype = get_float_dtype(xp)
        nodes = xp.asarray(half * nodes + domain.center, dtype=dtype)
        weights = xp.asarray(half * weights, dtype=dtype)
        return nodes, weights

    def refined(self) -> "GaussLegendre":
        return GaussLegendre(npoints=2*self.npoints)

    def __repr__(self) -> str:
        return f"GaussLegendre(npoints={self.npoints})"

_rules: dict[int, tuple[np.ndarray, np.ndarray]] = {}
def _leggauss(npoints: int) -> tuple[np.ndarray, np.ndarray]:
    if npoints not in _rules:
        _rules[npoints] = np.polynomial.legendre.leggauss(npoints)
    return _rules[npoints]

def inner[T: ArrayLike](
        xp: ArrayNamespace[T],
        f: Callable[[T], T],
        g: Callable[[T], T],
        domain: Domain,
        quadrature: Optional[Quadrature] = None) -> Any:
    """Bilinear inner product :math:`\\int f(t) g(t) dt` over domain, by default with GaussLegendre()."""
    if quadrature is None:
        quadrature = GaussLegendre()
    nodes, weights = quadrature.nodes_weights(xp, domain)
    return xp.sum(weights * f(nodes) * g(nodes)) # type: ignore
