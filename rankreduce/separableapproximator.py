# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

import logging
import warnings
from typing import Any, Callable, Literal, Optional
from dataclasses import dataclass
from concurrent.futures import Executor, ThreadPoolExecutor

from .backend import ArrayLike, ArrayNamespace, get_float_dtype, shape
from .domain import Rectangle
from .errors import RankCappedWarning
from .samplinggrid import SamplingGrid
from .separablerepresentation import SeparableRepresentation, BivariateFunction, Pivot, sample, eliminate
from .utils import check_pos, check_non_neg, check_at_least, is_invertible, to_scalar

logger = logging.getLogger(__name__)

ToleranceMode = Literal["relative", "absolute"]
PivotCallback = Callable[[int, Pivot], bool]

@dataclass(kw_only=True)
class SeparableApproximator:
    """
    Adaptive separable approximation of bivariate functions, the continuous analogue of
    Gaussian elimination with complete pivoting. In every step the residual is searched for
    its largest magnitude, first on a uniform sampling grid and then on finer patches around
    the best grid point. The residual along the two lines through the pivot defines the next
    term, which is subtracted from the residual. The residual itself is never stored, it is
    evaluated from the original function and the extracted terms where the search needs it.

    The pivot search only has to find a value within a constant factor of the true maximum.
    An under-resolved grid can miss narrow features, which costs additional terms but does
    not make the approximation wrong at the sampled points.
    """

    #: Number of sampling points per variable, or one size per variable.
    grid_size: int | tuple[int, int] = 129
    #: Number of local refinement rounds after the grid search.
    refinements: int = 2
    #: Number of points per variable on each refinement patch.
    refine_points: int = 9
    #: Number of grid rows whose residual is evaluated at once.
    chunk_size: int = 64
    #: Number of threads evaluating chunks concurrently.
    workers: int = 1

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "grid_size":
            sizes = (value, value) if isinstance(value, int) else value
            for size in sizes:
                check_at_least(name, size, 2)
        elif name == "refinements":
            check_non_neg(name, value)
        elif name == "refine_points":
            check_at_least(name, value, 3)
        elif name in ("chunk_size", "workers"):
            check_pos(name, value)
        super().__setattr__(name, value)

    def __call__[T: ArrayLike](
            self,
            xp: ArrayNamespace[T],
            func: BivariateFunction[T],
            rectangle: Rectangle,
            tolerance: float = 1e-10,
            max_rank: int = 50,
            mode: ToleranceMode = "relative",
            callback: Optional[PivotCallback] = None,
            ) -> SeparableRepresentation[T]:
        """
        Decompose func on the rectangle. Terms are extracted until the largest residual drops
        below tolerance (times the first pivot in relative mode), max_rank terms exist or the
        callback returns True. The callback receives the number of terms and the last pivot
        after each step. Capped or interrupted results are flagged on the representation.
        """
        check_non_neg("tolerance", tolerance)
        check_pos("max_rank", max_rank)
        if mode not in ("relative", "absolute"):
            raise ValueError(f"Unknown tolerance mode {mode}.")

        grid = SamplingGrid(rectangle, self.grid_size)
        elim = _Elimination(xp, func, max_rank, *grid.axes(xp))

        executor = ThreadPoolExecutor(max_workers=self.workers) if self.workers > 1 else None
        try:
            return self._decompose(elim, grid, tolerance, mode, callback, executor)
        finally:
            if executor is not None:
                executor.shutdown()

    def _decompose[T: ArrayLike](
            self,
            elim: "_Elimination[T]",
            grid: SamplingGrid,
            tolerance: float,
            mode: ToleranceMode,
            callback: Optional[PivotCallback],
            executor: Optional[Executor],
            ) -> SeparableRepresentation[T]:
        first, threshold = 0.0, tolerance
        rank_capped, interrupted = False, False
        while True:
            pivot = elim.grid_search(self.chunk_size, executor)
            pivot = elim.refine(pivot, grid, self.refinements, self.refine_points)
            residual = abs(pivot)
            singular = not is_invertible(pivot.value, elim.largest)

            if elim.rank == 0:
                first = residual
                if singular:
                    logger.debug("first pivot %.3e on %s is numerically zero", residual, grid.rectangle)
                    break
                if mode == "relative":
                    threshold = tolerance * first

            if singular or residual <= threshold:
                break
            if elim.rank == elim.max_rank:
                rank_capped = True
                warnings.warn(f"Separable approximation reached max_rank={elim.max_rank} "
                              f"with residual {residual:.3e} above {threshold:.3e}.",
                              RankCappedWarning, stacklevel=3)
                break

            elim.add(pivot)
            logger.debug("term %d: pivot (%.6g, %.6g), |g|=%.3e",
                         elim.rank, pivot.x, pivot.y, residual)
            if callback is not None and callback(elim.rank, pivot):
                interrupted = True
                break

        return elim.result(grid.rectangle,
                           residual=residual,
                           first_pivot=first,
                           tolerance=threshold,
                           rank_capped=rank_capped,
                           interrupted=interrupted)

    def __repr__(self) -> str:
        return (f"SeparableApproximator(grid_size={self.grid_size}, refinements={self.refinements}, "
                f"refine_points={self.refine_points}, chunk_size={self.chunk_size}, workers={self.workers})")

class _Elimination[T: ArrayLike]:
    """
    Working state of one decomposition. Pivots and coupling values are kept in buffers of
    size max_rank, the factor functions on the grid lines are updated after each step.
    """

    xp: ArrayNamespace[T]
    func: BivariateFunction[T]
    max_rank: int
    rank: int

    def __init__(
            self,
            xp: ArrayNamespace[T],
            func: BivariateFunction[T],
            max_rank: int,
            xgrid: T,
            ygrid: T) -> None:
        self.xp = xp
        self.func = func
        self.max_rank = max_rank
        self.rank = 0
        self.xgrid, self.ygrid = xgrid, ygrid

        head = sample(xp, func, xgrid[:1], ygrid[:1])
        if xp.isdtype(head.dtype, ("real floating", "complex floating")): # type: ignore
            self.dtype = head.dtype
        else:
            self.dtype = get_float_dtype(xp)
        self.largest = float(xp.finfo(self.dtype).max)

        coord_type = xgrid.dtype
        self.xs = xp.zeros((max_rank,), dtype=coord_type)
        self.ys = xp.zeros((max_rank,), dtype=coord_type)
        self.values = xp.zeros((max_rank,), dtype=self.dtype)
        self.row_coupling = xp.zeros((max_rank, max_rank), dtype=self.dtype)
        self.column_coupling = xp.zeros((max_rank, max_rank), dtype=self.dtype)
        self.grid_rows = xp.zeros((shape(xgrid)[0], max_rank), dtype=self.dtype)
        self.grid_columns = xp.zeros((shape(ygrid)[0], max_rank), dtype=self.dtype)

    @property
    def weights(self) -> T:
        return 1.0 / self.values[:self.rank]

    def sample(self, x: T, y: T) -> T:
        return self.xp.astype(sample(self.xp, self.func, x, y), self.dtype)

    def rows(self, x: T) -> T:
        xp, n = self.xp, self.rank
        if n == 0:
            return xp.zeros((shape(x)[0], 0), dtype=self.dtype)
        vals = self.sample(x[:,xp.newaxis], self.ys[xp.newaxis,:n])
        return eliminate(vals, self.weights, self.row_coupling[:n,:n])

    def columns(self, y: T) -> T:
        xp, n = self.xp, self.rank
        if n == 0:
            return xp.zeros((shape(y)[0], 0), dtype=self.dtype)
        vals = self.sample(self.xs[xp.newaxis,:n], y[:,xp.newaxis])
        return eliminate(vals, self.weights, self.column_coupling[:n,:n])

    def residual(self, x: T, y: T, rows: T, columns: T) -> T:
        """Residual on the tensor grid x times y, given the factor functions on these points."""
        xp = self.xp
        vals = self.sample(x[:,xp.newaxis], y[xp.newaxis,:])
        if self.rank == 0:
            return vals
        return vals - (rows * self.weights) @ columns.T

    def argmax(self, x: T, y: T, block: T) -> Pivot:
        xp = self.xp
        ny = shape(block)[1]
        idx = int(xp.argmax(xp.reshape(xp.abs(block), (-1,))))
        i, j = divmod(idx, ny)
        return Pivot(float(x[i]), float(y[j]), to_scalar(block[i,j]))

    def grid_search(self, chunk_size: int, executor: Optional[Executor]) -> Pivot:
        n = self.rank
        columns = self.grid_columns[:,:n]

        def search(cut: slice) -> Pivot:
            x = self.xgrid[cut]
            block = self.residual(x, self.ygrid, self.grid_rows[cut,:n], columns)
            return self.argmax(x, self.ygrid, block)

        nx = shape(self.xgrid)[0]
        cuts = [slice(i, min(i+chunk_size, nx)) for i in range(0, nx, chunk_size)]
        if executor is None or len(cuts) == 1:
            candidates = [search(cut) for cut in cuts]
        else:
            candidates = list(executor.map(search, cuts))
        return max(candidates, key=abs)

    def refine(self, pivot: Pivot, grid: SamplingGrid, rounds: int, points: int) -> Pivot:
        for _ in range(rounds):
            grid = grid.patch(pivot.x, pivot.y, points)
            x, y = grid.axes(self.xp)
            block = self.residual(x, y, self.rows(x), self.columns(y))
            candidate = self.argmax(x, y, block)
            if abs(candidate) > abs(pivot):
                pivot = candidate
        return pivot

    def add(self, pivot: Pivot) -> None:
        """Extract the term through pivot and update the factor functions on the grid lines."""
        xp, n = self.xp, self.rank
        x = xp.asarray([pivot.x], dtype=self.xs.dtype)
        y = xp.asarray([pivot.y], dtype=self.ys.dtype)
        self.row_coupling[:n,n] = self.columns(y)[0,:]
        self.column_coupling[:n,n] = self.rows(x)[0,:]

        weights = self.weights
        self.grid_rows[:,n] = self.sample(self.xgrid, y) \
                            - self.grid_rows[:,:n] @ (weights * self.row_coupling[:n,n])
        self.grid_columns[:,n] = self.sample(x, self.ygrid) \
                               - self.grid_columns[:,:n] @ (weights * self.column_coupling[:n,n])
        self.xs[n] = pivot.x
        self.ys[n] = pivot.y
        self.values[n] = pivot.value
        self.rank += 1

    def result(self, rectangle: Rectangle, **flags: Any) -> SeparableRepresentation[T]:
        n = self.rank
        return SeparableRepresentation(
                self.func, rectangle,
                self.xs[:n], self.ys[:n], self.values[:n],
                self.row_coupling[:n,:n], self.column_coupling[:n,:n],
                **flags)
