# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Protocol
from .backend import ArrayLike

class MatrixEigenvalues(Protocol):
    """Protocol for a dense eigenvalue solver of general square matrices."""

    def __call__(self, mat: ArrayLike, /) -> ArrayLike:
        """
        Return the eigenvalues of a square matrix in any order. Failures to
        converge are raised as SolverFailure.
        """
        ...
