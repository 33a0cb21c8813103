# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

class DimensionMismatch(ValueError):
    """The factor matrices of a product are not conformable."""

    left: tuple[int, ...]
    right: tuple[int, ...]

    def __init__(self, left: tuple[int, ...], right: tuple[int, ...]) -> None:
        self.left = left
        self.right = right
        super().__init__(f"Factor shapes do not match, got {left} and {right}.")

class SolverFailure(RuntimeError):
    """The dense eigenvalue solver did not produce eigenvalues."""

    #: Size of the square matrix the solver was called with.
    size: int

    def __init__(self, size: int, reason: str = "") -> None:
        self.size = size
        msg = f"Dense eigenvalue solver failed on a {size}x{size} matrix"
        super().__init__(f"{msg}: {reason}" if reason else f"{msg}.")

class RankCappedWarning(UserWarning):
    """A separable approximation reached its maximal rank before the tolerance."""
