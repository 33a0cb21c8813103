# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from dataclasses import dataclass, replace

from .backend import ArrayLike, namespace_of_arrays, size
from .utils import check_non_neg

@dataclass(frozen=True, kw_only=True)
class EigenResult[T: ArrayLike]:
    """
    Eigenvalues of a finite-rank operator. Only the explicitly computed eigenvalues are
    stored, the eigenvalues known to vanish by rank deficiency are counted in
    implicit_zeros. For integral operators implicit_zeros is always zero, their zero
    eigenspace is infinite-dimensional and never represented.
    """

    #: Explicitly computed eigenvalues, complex and in the order of the dense solver.
    eigenvalues: T
    #: Number of eigenvalues that vanish by rank deficiency.
    implicit_zeros: int = 0
    #: Set if the eigenvalues stem from a separable approximation that did not reach its tolerance.
    approximate: bool = False

    def __post_init__(self) -> None:
        check_non_neg("implicit_zeros", self.implicit_zeros)

    @property
    def rank(self) -> int:
        """Number of explicitly computed eigenvalues."""
        return size(self.eigenvalues)

    @property
    def size(self) -> int:
        """Size of the operator in the discrete case, explicit plus implicit eigenvalues."""
        return self.rank + self.implicit_zeros

    @property
    def spectral_radius(self) -> float:
        if self.rank == 0:
            return 0.0
        xp = namespace_of_arrays(self.eigenvalues)
        return float(xp.max(xp.abs(self.eigenvalues)))

    def all_eigenvalues(self) -> T:
        """All eigenvalues with the implicit zeros appended explicitly."""
        xp = namespace_of_arrays(self.eigenvalues)
        zeros = xp.zeros((self.implicit_zeros,),
                         dtype=self.eigenvalues.dtype,
                         device=self.eigenvalues.device)
        return xp.concat([self.eigenvalues, zeros])

    def sorted(self) -> "EigenResult[T]":
        """Same result with the eigenvalues ordered by descending modulus."""
        xp = namespace_of_arrays(self.eigenvalues)
        order = xp.argsort(xp.abs(self.eigenvalues), descending=True, stable=True) # type: ignore
        return replace(self, eigenvalues=xp.take(self.eigenvalues, order))

    def scaled(self, factor: float) -> "EigenResult[T]":
        """
        Multiply all eigenvalues by factor, e.g. 1/sqrt(m*n) to map the spectrum of a
        random m x n product onto the unit disk. Scaling is never applied implicitly.
        """
        return replace(self, eigenvalues=self.eigenvalues * factor)

    def __len__(self) -> int:
        return self.rank

    def __repr__(self) -> str:
        return (f"EigenResult(rank={self.rank}, implicit_zeros={self.implicit_zeros}, "
                f"approximate={self.approximate})")
