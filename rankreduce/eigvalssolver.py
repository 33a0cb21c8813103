# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any
import numpy as np

from .backend import ArrayLike, namespace_of_arrays, get_complex_dtype, shape
from .errors import SolverFailure

class EigvalsSolver:
    """Eigenvalues of a general (non-symmetric) dense matrix from the linalg extension of the backend."""

    def __call__[T: ArrayLike](self, mat: T) -> T:
        xp = namespace_of_arrays(mat)
        if not hasattr(xp, "linalg"):
            raise NotImplementedError(
                f"Extension linalg is missing from namespace {xp}.")
        n = shape(mat)[0]
        try:
            if hasattr(xp.linalg, "eigvals"):
                vals = xp.linalg.eigvals(mat)
            elif hasattr(xp.linalg, "eig"):
                vals = xp.linalg.eig(mat)[0]
            else:
                raise NotImplementedError(
                    f"Method linalg.eigvals is not implemented for backend {xp}.")
        except linalg_errors(xp) as err:
            raise SolverFailure(n, str(err)) from err

        vals = xp.astype(vals, get_complex_dtype(xp))
        if not bool(xp.all(xp.isfinite(vals))):
            raise SolverFailure(n, "non-finite eigenvalues")
        return vals

    def __repr__(self) -> str:
        return "EigvalsSolver()"

def linalg_errors(xp: Any) -> tuple[type[Exception], ...]:
    """Exception types signalling a failed factorization in the linalg extension of xp."""
    errors: list[type[Exception]] = [np.linalg.LinAlgError]
    for owner in (xp.linalg, xp):
        err = getattr(owner, "LinAlgError", None)
        if isinstance(err, type) and issubclass(err, Exception) and err not in errors:
            errors.append(err)
    return tuple(errors)
