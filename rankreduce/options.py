# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Hashable, Literal, Any, Self, overload
from enum import Enum
from copy import deepcopy
import threading

from .backend import ArrayNamespace
from .matrixeigenvalues import MatrixEigenvalues
from .pairing import QuadraturePairing
from .separableapproximator import SeparableApproximator, ToleranceMode
from .utils import check_pos, check_non_neg

class OptionType(Enum):
    SEPARABLE = 0
    QUADRATURE = 1
    EIGEN = 2

class Options:

    key: Hashable

    def __init__(self, namespace: ArrayNamespace, category: OptionType):
        self.key = (namespace, category, threading.get_ident())

    def __enter__(self) -> Self:
        global _opts
        if self.key in _opts:
            self._tmp = _opts[self.key]
        else:
            self._tmp = None
        _opts[self.key] = self
        return self

    def __exit__(self, *_) -> None:
        global _opts
        if self._tmp is not None:
            _opts[self.key] = self._tmp
        else:
            del _opts[self.key]

class SeparableOptions(Options):
    """
    Context manager for separable approximations. Used by decompositions and by
    eigenvalue computations that start from a bivariate function.
    """

    #: Pivot search settings, most importantly the sampling grid resolution.
    approximator: SeparableApproximator
    #: Tolerance on the pivot magnitude.
    tolerance: float
    #: Maximal number of terms.
    max_rank: int
    #: Whether the tolerance is relative to the first pivot or absolute.
    mode: ToleranceMode

    def __init__(
            self, *,
            namespace: ArrayNamespace,
            approximator: SeparableApproximator,
            tolerance: float = 1e-10,
            max_rank: int = 50,
            mode: ToleranceMode = "relative"):
        check_non_neg("tolerance", tolerance)
        check_pos("max_rank", max_rank)
        self.approximator = deepcopy(approximator)
        self.tolerance = tolerance
        self.max_rank = max_rank
        self.mode = mode
        super().__init__(namespace, OptionType.SEPARABLE)

class QuadratureOptions(Options):
    """
    Context manager for the inner products of factor functions in kernel eigenvalue computations.
    """

    #: Quadrature based pairing of row and column functions.
    pairing: QuadraturePairing

    def __init__(
            self, *,
            namespace: ArrayNamespace,
            pairing: QuadraturePairing):
        self.pairing = deepcopy(pairing)
        super().__init__(namespace, OptionType.QUADRATURE)

class EigenOptions(Options):
    """
    Context manager for the dense eigenvalue solver of the reduced problems.
    """

    #: Dense eigenvalue solver.
    solver: MatrixEigenvalues

    def __init__(
            self, *,
            namespace: ArrayNamespace,
            solver: MatrixEigenvalues):
        self.solver = deepcopy(solver)
        super().__init__(namespace, OptionType.EIGEN)

_opts: dict[Any, Options] = {}

@overload
def get_options(namespace: ArrayNamespace, otype: Literal[OptionType.SEPARABLE]) -> SeparableOptions: ...
@overload
def get_options(namespace: ArrayNamespace, otype: Literal[OptionType.QUADRATURE]) -> QuadratureOptions: ...
@overload
def get_options(namespace: ArrayNamespace, otype: Literal[OptionType.EIGEN]) -> EigenOptions: ...
# implementation
def get_options(namespace: ArrayNamespace, otype: OptionType) -> Options:
    global _opts
    key = (namespace, otype, threading.get_ident())
    if key in _opts:
        return _opts[key]
    else:
        raise KeyError("No options set for the current thread.")

def set_options(opts: SeparableOptions | QuadratureOptions | EigenOptions) -> None:
    global _opts
    _opts[opts.key] = opts
