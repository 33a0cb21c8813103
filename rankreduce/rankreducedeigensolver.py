# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

import logging
from typing import Any, Optional
from dataclasses import dataclass, field

from .backend import ArrayLike, ArrayNamespace, namespace_of_arrays, get_complex_dtype, shape
from .domain import Rectangle
from .eigenresult import EigenResult
from .eigvalssolver import EigvalsSolver
from .matrixeigenvalues import MatrixEigenvalues
from .pairing import Pairing, MatrixPairing, QuadraturePairing
from .quasimatrix import Quasimatrix
from .separableapproximator import SeparableApproximator, ToleranceMode, PivotCallback
from .separablerepresentation import SeparableRepresentation, BivariateFunction

logger = logging.getLogger(__name__)

@dataclass(kw_only=True)
class RankReducedEigensolver:
    """
    Nonzero eigenvalues of finite-rank operators. A rank n operator :math:`A B^T` has the same
    nonzero eigenvalues as the n x n matrix :math:`B^T A`. For matrices the product is formed
    directly, for integral operators with separable kernel
    :math:`\\sum_k w_k r_k(x) c_k(y)` the matrix :math:`M_{ij} = w_j \\int c_i(t) r_j(t) dt`
    is assembled by quadrature. The small matrix is handed to a dense eigenvalue solver.
    """

    #: Dense eigenvalue solver for the reduced matrix.
    solver: MatrixEigenvalues = field(default_factory=EigvalsSolver)
    #: Pairing of factor matrices.
    matrix_pairing: MatrixPairing = field(default_factory=MatrixPairing)
    #: Pairing of factor functions.
    kernel_pairing: QuadraturePairing = field(default_factory=QuadraturePairing)

    def reduce[L, T: ArrayLike](self, pairing: Pairing[L], left: L, right: L) -> T:
        """Eigenvalues of the matrix obtained by pairing the left and right factors."""
        return self.solve(pairing(left, right)) # type: ignore

    def solve[T: ArrayLike](self, mat: T) -> T:
        """Eigenvalues of the reduced matrix, an empty complex array for 0 x 0 matrices."""
        n = shape(mat)[0]
        xp = namespace_of_arrays(mat)
        if n == 0:
            return xp.zeros((0,), dtype=get_complex_dtype(xp))
        logger.debug("solving reduced %dx%d eigenvalue problem", n, n)
        return self.solver(mat) # type: ignore

    def eigenvalues_of_product[T: ArrayLike](self, A: T, B: T) -> EigenResult[T]:
        """
        Eigenvalues of :math:`A B^T` for two m x n matrices. The n eigenvalues of
        :math:`B^T A` are computed, the remaining m-n eigenvalues are implicit zeros.
        If m < n the computed eigenvalues already contain all of them. If one factor
        vanishes all m eigenvalues are implicit zeros.
        """
        mat = self.matrix_pairing(A, B)
        m, n = shape(A)
        xp = namespace_of_arrays(A, B)
        if not (bool(xp.any(A != 0)) and bool(xp.any(B != 0))):
            vals = xp.zeros((0,), dtype=get_complex_dtype(xp))
            return EigenResult(eigenvalues=vals, implicit_zeros=m)
        return EigenResult(eigenvalues=self.solve(mat), implicit_zeros=max(m-n, 0))

    def eigenvalues_of_kernel[T: ArrayLike](self, representation: SeparableRepresentation[T]) -> EigenResult[T]:
        """
        Nonzero eigenvalues of the integral operator :math:`(Ku)(x) = \\int f(x,y) u(y) dy`
        with the separable kernel of the representation. The rectangle must be square.
        Results of capped or interrupted decompositions are marked approximate.
        """
        rect = representation.rectangle
        if not rect.is_square:
            raise ValueError(f"Integral operators need a square domain, got {rect}.")
        xp = representation.namespace
        approximate = not representation.converged
        if representation.rank == 0:
            vals = xp.zeros((0,), dtype=get_complex_dtype(xp))
            return EigenResult(eigenvalues=vals, approximate=approximate)

        left, right = kernel_factors(representation)
        vals = self.reduce(self.kernel_pairing, left, right)
        return EigenResult(eigenvalues=vals, approximate=approximate)

    def eigenvalues[T: ArrayLike](
            self,
            xp: ArrayNamespace[T],
            func: BivariateFunction[T],
            rectangle: Rectangle,
            approximator: Optional[SeparableApproximator] = None,
            tolerance: float = 1e-10,
            max_rank: int = 50,
            mode: ToleranceMode = "relative",
            callback: Optional[PivotCallback] = None,
            ) -> EigenResult[T]:
        """Decompose func to the tolerance and return the eigenvalues of its integral operator."""
        if approximator is None:
            approximator = SeparableApproximator()
        representation = approximator(xp, func, rectangle, tolerance, max_rank, mode, callback)
        return self.eigenvalues_of_kernel(representation)

    def __repr__(self) -> str:
        return (f"RankReducedEigensolver(solver={self.solver!r}, "
                f"kernel_pairing={self.kernel_pairing!r})")

def kernel_factors[T: ArrayLike](representation: SeparableRepresentation[T]) -> tuple[Quasimatrix[T], Quasimatrix[T]]:
    """
    Factor quasimatrices of a separable kernel written as :math:`A B^T`, with
    :math:`A = [w_1 r_1, ..., w_n r_n]` in x and :math:`B = [c_1, ..., c_n]` in y.
    """
    xp = representation.namespace
    rect = representation.rectangle
    weights = representation.weights

    def left(x: Any) -> Any:
        return representation.rows(x) * weights

    left_factor = Quasimatrix(xp=xp, domain=rect.xdomain, columns=left, ncols=representation.rank)
    right_factor = Quasimatrix(xp=xp, domain=rect.ydomain, columns=representation.columns, ncols=representation.rank)
    return left_factor, right_factor
