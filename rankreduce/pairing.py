# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

import logging
from typing import Any, Literal, Optional, Protocol
from dataclasses import dataclass, field
import opt_einsum as oe

from .backend import ArrayLike, namespace_of_arrays, shape
from .errors import DimensionMismatch
from .quadrature import Quadrature, GaussLegendre
from .quasimatrix import Quasimatrix
from .utils import check_pos, check_non_neg

logger = logging.getLogger(__name__)

OptimizeKind = Literal["optimal", "dp", "greedy", "random-greedy", "random-greedy-128", "branch-all", "branch-2", "auto", "auto-hq"]
DEFAULT_OPTIMIZER: OptimizeKind = "greedy"

class Pairing[L](Protocol):
    """
    Protocol for the pairing of two factor sets into the small matrix of a rank reduction.
    For factors A and B of the operator A B^T the result is B^T A, whose eigenvalues are
    the nonzero eigenvalues of A B^T.
    """

    def __call__(self, left: L, right: L, /) -> ArrayLike: ...

@dataclass(kw_only=True)
class MatrixPairing:
    """Pairing of two m x n matrices, :math:`M = B^T A`."""

    optimizer: OptimizeKind = DEFAULT_OPTIMIZER

    def __call__[T: ArrayLike](self, left: T, right: T) -> T:
        if len(shape(left)) != 2 or len(shape(right)) != 2:
            raise ValueError("Factors must be matrices.")
        if shape(left) != shape(right):
            raise DimensionMismatch(shape(left), shape(right))
        return oe.contract("ki,kj->ij", right, left, optimize=self.optimizer) # type: ignore

@dataclass(kw_only=True)
class QuadraturePairing:
    """
    Pairing of two quasimatrices over their shared continuous variable,
    :math:`M_{ij} = \\int b_i(t) a_j(t) dt`. The integral is evaluated with the given
    quadrature. If eps is set the number of nodes is doubled until the relative change
    of M drops below eps or max_points is exceeded.
    """

    quadrature: Quadrature = field(default_factory=GaussLegendre)
    eps: Optional[float] = None
    max_points: int = 4096
    optimizer: OptimizeKind = DEFAULT_OPTIMIZER

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "eps" and value is not None:
            check_non_neg(name, value)
        elif name == "max_points":
            check_pos(name, value)
        super().__setattr__(name, value)

    def __call__[T: ArrayLike](self, left: Quasimatrix[T], right: Quasimatrix[T]) -> T:
        if left.domain != right.domain:
            raise ValueError(f"Quasimatrices live on different domains, "
                             f"{left.domain} and {right.domain}.")
        if left.ncols != right.ncols:
            raise DimensionMismatch((left.ncols,), (right.ncols,))

        quad = self.quadrature
        mat = self._assemble(quad, left, right)
        if self.eps is None:
            return mat

        xp = namespace_of_arrays(mat)
        change: Optional[float] = None
        while 2*quad.npoints <= self.max_points:
            quad = quad.refined()
            new = self._assemble(quad, left, right)
            scale = float(xp.linalg.vector_norm(new))
            change = float(xp.linalg.vector_norm(new - mat)) / scale if scale > 0 else 0.0
            mat = new
            if change <= self.eps:
                logger.debug("quadrature converged with %d nodes", quad.npoints)
                return mat
        if change is not None:
            logger.warning("quadrature stopped at %d nodes with relative change %.3e above %.3e",
                           quad.npoints, change, self.eps)
        return mat

    def _assemble[T: ArrayLike](self, quad: Quadrature, left: Quasimatrix[T], right: Quasimatrix[T]) -> T:
        nodes, weights = quad.nodes_weights(left.xp, left.domain)
        return oe.contract("k,ki,kj->ij", weights, right(nodes), left(nodes), optimize=self.optimizer) # type: ignore
