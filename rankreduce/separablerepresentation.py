# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Callable, Iterator, Sequence, SupportsIndex, overload
from collections.abc import Sequence as SequenceABC
from dataclasses import dataclass

from .backend import ArrayLike, ArrayNamespace, namespace_of_arrays, get_index_dtype, shape, size
from .domain import Rectangle
from .utils import to_scalar

type BivariateFunction[T] = Callable[[T, T], T]

@dataclass(frozen=True)
class Pivot:
    """Point of maximal residual magnitude and the residual value at that point."""

    x: float
    y: float
    value: complex | float

    def __abs__(self) -> float:
        return abs(self.value)

@dataclass(frozen=True, kw_only=True)
class SeparableFactor[T: ArrayLike]:
    """
    One term of a separable decomposition. The term contributes
    pivot_weight * row_function(x) * column_function(y) to the kernel.
    """

    #: Residual along the pivot line y=y*, a function of the first variable x.
    row_function: Callable[[T], T]
    #: Residual along the pivot line x=x*, a function of the second variable y.
    column_function: Callable[[T], T]
    #: Reciprocal of the pivot value, finite and nonzero.
    pivot_weight: complex | float
    pivot: Pivot
    #: Elimination step that extracted the term, starting at 0.
    step: int

def sample[T: ArrayLike](xp: ArrayNamespace[T], func: BivariateFunction[T], x: T, y: T) -> T:
    """Evaluate func on broadcastable x and y, constant results are broadcast."""
    bshape = shape(xp.broadcast_arrays(x, y)[0])
    vals = xp.asarray(func(x, y))
    if shape(vals) != bshape:
        vals = xp.broadcast_to(vals, bshape)
    return vals

def eliminate[T: ArrayLike](vals: T, weights: T, coupling: T) -> T:
    """
    Turn samples of f along the pivot lines into samples of the factor functions.
    vals[:,k] holds f along the k-th pivot line and coupling[j,k] the j-th factor
    function evaluated at the k-th pivot, only its strict upper triangle is used.
    """
    xp = namespace_of_arrays(vals, weights, coupling)
    res = xp.zeros(shape(vals), dtype=vals.dtype, device=vals.device)
    for k in range(shape(vals)[1]):
        res[:,k] = vals[:,k] - res[:,:k] @ (weights[:k] * coupling[:k,k])
    return res

class SeparableRepresentation[T: ArrayLike](SequenceABC):
    """
    Finite separable approximation :math:`f(x,y) \\approx \\sum_k w_k r_k(x) c_k(y)`
    of a bivariate function on a rectangle, as produced by the SeparableApproximator.

    The factor functions are not stored as samples. They are defined through the
    original function and the pivots, r_k(x) is the residual after k-1 steps
    along y=y*_k and c_k(y) the residual along x=x*_k. Evaluations reproduce them
    on demand with the elimination recurrence. The representation is a value: all
    arrays are copied on construction and no method changes its state.

    Terms are presented by descending pivot magnitude, ties in extraction order.
    Complete pivoting does not extract them in that order, so the sequence, pivots,
    weights and the columns of rows and columns are permuted accordingly while the
    recurrence keeps running in extraction order. SeparableFactor.step holds the
    extraction step of a term.
    """

    __slots__ = ("_func", "_rectangle", "_xs", "_ys", "_values", "_weights",
                 "_row_coupling", "_column_coupling", "_order", "_factors",
                 "_residual", "_first_pivot", "_tolerance", "_rank_capped", "_interrupted")

    _func: BivariateFunction[T]
    _xs: T
    _ys: T
    _values: T
    _weights: T
    _row_coupling: T
    _column_coupling: T
    _order: T
    _factors: tuple[SeparableFactor[T], ...]

    @property
    def function(self) -> BivariateFunction[T]:
        """The approximated function."""
        return self._func

    @property
    def rectangle(self) -> Rectangle:
        return self._rectangle

    @property
    def rank(self) -> int:
        return len(self._factors)

    @property
    def residual(self) -> float:
        """Magnitude of the largest residual found by the last pivot search."""
        return self._residual

    @property
    def first_pivot(self) -> float:
        """Magnitude of the first extracted pivot, the reference for relative tolerances."""
        return self._first_pivot

    @property
    def tolerance(self) -> float:
        """Absolute threshold below which pivots were rejected."""
        return self._tolerance

    @property
    def rank_capped(self) -> bool:
        """Set if the maximal rank was reached before the tolerance was met."""
        return self._rank_capped

    @property
    def interrupted(self) -> bool:
        """Set if the decomposition was stopped by a callback."""
        return self._interrupted

    @property
    def converged(self) -> bool:
        return not (self._rank_capped or self._interrupted)

    @property
    def pivots(self) -> Sequence[Pivot]:
        return [factor.pivot for factor in self._factors]

    @property
    def weights(self) -> T:
        xp = self.namespace
        return xp.take(self._weights, self._order)

    @property
    def namespace(self) -> ArrayNamespace[T]:
        return namespace_of_arrays(self._xs)

    def __init__(
            self,
            func: BivariateFunction[T],
            rectangle: Rectangle,
            xs: T,
            ys: T,
            values: T,
            row_coupling: T,
            column_coupling: T, *,
            residual: float,
            first_pivot: float,
            tolerance: float,
            rank_capped: bool = False,
            interrupted: bool = False) -> None:
        n = size(values)
        if not (size(xs) == size(ys) == n):
            raise ValueError("Pivot coordinates and values must have the same length.")
        if shape(row_coupling) != (n, n) or shape(column_coupling) != (n, n):
            raise ValueError(f"Coupling matrices must have shape ({n}, {n}).")
        xp = namespace_of_arrays(values)
        if n > 0 and bool(xp.any(values == 0)):
            raise ValueError("Pivot values must be nonzero.")

        self._func = func
        self._rectangle = rectangle
        self._xs = self._copy(xs)
        self._ys = self._copy(ys)
        self._values = self._copy(values)
        self._weights = 1.0 / self._values
        if n > 0 and not bool(xp.all(xp.isfinite(self._weights))):
            raise ValueError("Pivot weights must be finite.")
        self._row_coupling = self._copy(row_coupling)
        self._column_coupling = self._copy(column_coupling)
        self._residual = float(residual)
        self._first_pivot = float(first_pivot)
        self._tolerance = float(tolerance)
        self._rank_capped = rank_capped
        self._interrupted = interrupted
        magnitudes = [abs(to_scalar(self._values[k])) for k in range(n)]
        order = sorted(range(n), key=lambda k: -magnitudes[k])
        self._order = xp.asarray(order, dtype=get_index_dtype(xp))
        self._factors = tuple(self._factor(k) for k in order)

    #-------------------------------------------------------------------------
    #evaluation

    def rows(self, x: T) -> T:
        """Row functions r_k at the points x, shape (len(x), rank), in sequence order."""
        xp = self.namespace
        return xp.take(self._rows(x, self.rank), self._order, axis=1)

    def columns(self, y: T) -> T:
        """Column functions c_k at the points y, shape (len(y), rank), in sequence order."""
        xp = self.namespace
        return xp.take(self._columns(y, self.rank), self._order, axis=1)

    def __call__(self, x: T, y: T) -> T:
        """Evaluate the separable approximation pointwise on broadcastable x and y."""
        xp = self.namespace
        x, y = xp.asarray(x), xp.asarray(y)
        x, y = xp.broadcast_arrays(x, y)
        bshape = shape(x)
        if self.rank == 0:
            return xp.zeros(bshape, dtype=self._values.dtype)
        rows, cols = self._rows(x, self.rank), self._columns(y, self.rank)
        return xp.reshape(xp.sum(rows * self._weights * cols, axis=1), bshape)

    def residual_at(self, x: T, y: T) -> T:
        """Evaluate f - approximation pointwise on broadcastable x and y."""
        xp = self.namespace
        x, y = xp.asarray(x), xp.asarray(y)
        return sample(xp, self._func, x, y) - self(x, y)

    #-------------------------------------------------------------------------
    #sequence behaviour

    def __len__(self) -> int:
        return len(self._factors)

    def __iter__(self) -> Iterator[SeparableFactor[T]]:
        return iter(self._factors)

    @overload
    def __getitem__(self, idx: SupportsIndex) -> SeparableFactor[T]: ...
    @overload
    def __getitem__(self, idx: slice) -> Sequence[SeparableFactor[T]]: ...
    #implementation
    def __getitem__(self, idx: SupportsIndex | slice) -> Any:
        return self._factors[idx]

    def __setattr__(self, name: str, value: Any) -> None:
        if hasattr(self, "_factors"):
            raise AttributeError("SeparableRepresentation is immutable.")
        object.__setattr__(self, name, value)

    def __repr__(self) -> str:
        return (f"SeparableRepresentation(rank={self.rank}, rectangle={self.rectangle}, "
                f"residual={self.residual:.2e}, rank_capped={self.rank_capped})")

    #-------------------------------------------------------------------------
    #helpers

    def _rows(self, x: T, rank: int) -> T:
        # first rank factors in extraction order
        xp = self.namespace
        x = xp.reshape(xp.asarray(x), (-1,))
        vals = sample(xp, self._func, x[:,xp.newaxis], self._ys[xp.newaxis,:rank])
        vals = xp.astype(vals, self._values.dtype)
        return eliminate(vals, self._weights[:rank], self._row_coupling[:rank,:rank])

    def _columns(self, y: T, rank: int) -> T:
        xp = self.namespace
        y = xp.reshape(xp.asarray(y), (-1,))
        vals = sample(xp, self._func, self._xs[xp.newaxis,:rank], y[:,xp.newaxis])
        vals = xp.astype(vals, self._values.dtype)
        return eliminate(vals, self._weights[:rank], self._column_coupling[:rank,:rank])

    def _factor(self, k: int) -> SeparableFactor[T]:
        xp = namespace_of_arrays(self._values)

        def row_function(x: T) -> T:
            x = xp.asarray(x)
            return xp.reshape(self._rows(x, k+1)[:,k], shape(x))

        def column_function(y: T) -> T:
            y = xp.asarray(y)
            return xp.reshape(self._columns(y, k+1)[:,k], shape(y))

        value = self._values[k]
        pivot = Pivot(float(self._xs[k]), float(self._ys[k]), to_scalar(value))
        return SeparableFactor(row_function=row_function,
                               column_function=column_function,
                               pivot_weight=to_scalar(1.0 / value),
                               pivot=pivot,
                               step=k)

    @staticmethod
    def _copy(array: T) -> T:
        xp = namespace_of_arrays(array)
        return xp.asarray(array, copy=True)
