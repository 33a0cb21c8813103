# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Callable, Optional, Sequence, Type, overload
import h5py

from .backend import ArrayNamespace, get_namespace
from .domain import Domain, Rectangle
from .samplinggrid import SamplingGrid
from .quadrature import GaussLegendre, Quadrature, inner
from .matrixeigenvalues import MatrixEigenvalues
from .eigvalssolver import EigvalsSolver
from .eigenresult import EigenResult
from .pairing import MatrixPairing, QuadraturePairing, OptimizeKind, DEFAULT_OPTIMIZER
from .separableapproximator import SeparableApproximator, ToleranceMode, PivotCallback
from .separablerepresentation import SeparableRepresentation, BivariateFunction
from .rankreducedeigensolver import RankReducedEigensolver
from .options import SeparableOptions, QuadratureOptions, EigenOptions, OptionType, set_options, get_options

from .io import write as _write
from .io import read as _read

class RankReduce[NDArray: Any]:
    """
    Entry point for separable approximations of bivariate functions and eigenvalues of
    finite-rank operators on a given array namespace. Default options are installed for
    the constructing thread and can be overridden with the context managers separable,
    quadrature and eigen.
    """

    #: Array namespace for the underlying array library.
    namespace: ArrayNamespace[NDArray]

    def __init__(self, namespace: Any) -> None:
        object.__setattr__(self, "namespace", get_namespace(namespace))

        set_options(self.separable())
        set_options(self.quadrature())
        set_options(self.eigen())

    #-------------------------------------------------------------------------------------------------
    # base wrapper

    def domain(self, lower: float, upper: float) -> Domain:
        """
        Domain, defining a one dimensional interval.
        """
        return Domain(lower, upper)

    @overload
    def rectangle(self, xdomain: Domain, ydomain: Domain, /) -> Rectangle: ...
    @overload
    def rectangle(self, bounds: Sequence[float], /) -> Rectangle: ...
    # implementation
    def rectangle(self, xdomain: Any, ydomain: Any = None, /) -> Rectangle:
        """
        Rectangle [x0,x1] x [y0,y1], given by two domains or by the bounds (x0, x1, y0, y1).
        """
        if ydomain is None:
            x0, x1, y0, y1 = xdomain
            return Rectangle(Domain(x0, x1), Domain(y0, y1))
        return Rectangle(xdomain, ydomain)

    def sampling_grid(self, rectangle: Rectangle, sizes: int | Sequence[int]) -> SamplingGrid[NDArray]:
        """
        Uniform sampling grid on a rectangle.
        """
        return SamplingGrid(rectangle, sizes)

    def gauss_legendre(self, npoints: int) -> GaussLegendre:
        """
        Gauss-Legendre quadrature rule with npoints nodes.
        """
        return GaussLegendre(npoints=npoints)

    def eigvals_solver(self) -> EigvalsSolver:
        """
        Dense eigenvalue solver of the backend.
        """
        return EigvalsSolver()

    #-------------------------------------------------------------------------------------------------
    # separable approximation

    def decompose(
            self,
            func: BivariateFunction[NDArray],
            rectangle: Rectangle,
            tolerance: Optional[float] = None,
            max_rank: Optional[int] = None,
            callback: Optional[PivotCallback] = None,
            ) -> SeparableRepresentation[NDArray]:
        """
        :math:`f(x,y)\\approx\\sum_k w_k r_k(x) c_k(y)`.\n
        Separable approximation of a vectorized bivariate function on a rectangle. Tolerance and
        max_rank default to the separable context manager. Check rank_capped on the result before
        trusting quantities derived from it. The callback is called after each term and stops the
        decomposition by returning True.
        """
        opts = get_options(self.namespace, OptionType.SEPARABLE)
        return opts.approximator(
                self.namespace, func, rectangle,
                tolerance=opts.tolerance if tolerance is None else tolerance,
                max_rank=opts.max_rank if max_rank is None else max_rank,
                mode=opts.mode,
                callback=callback)

    #-------------------------------------------------------------------------------------------------
    # eigenvalues

    def eigenvalues_of_product(self, A: NDArray, B: NDArray) -> EigenResult[NDArray]:
        """
        Eigenvalues of :math:`AB^T` for two m x n matrices, computed from :math:`B^TA`.
        The result holds n eigenvalues and max(m-n, 0) implicit zeros.
        """
        return self._eigensolver().eigenvalues_of_product(A, B)

    def eigenvalues_of_kernel(self, representation: SeparableRepresentation[NDArray]) -> EigenResult[NDArray]:
        """
        Nonzero eigenvalues of the integral operator with the separable kernel. Affected by the
        quadrature and eigen context managers.
        """
        return self._eigensolver().eigenvalues_of_kernel(representation)

    def eigenvalues(
            self,
            func: BivariateFunction[NDArray],
            rectangle: Rectangle,
            tolerance: Optional[float] = None,
            max_rank: Optional[int] = None,
            ) -> EigenResult[NDArray]:
        """
        Nonzero eigenvalues of the integral operator with kernel func on a square. The kernel is
        first decomposed, results of capped decompositions are marked approximate.
        """
        return self.eigenvalues_of_kernel(self.decompose(func, rectangle, tolerance, max_rank))

    def inner(
            self,
            f: Callable[[NDArray], NDArray],
            g: Callable[[NDArray], NDArray],
            domain: Domain) -> Any:
        """
        :math:`\\int f(t) g(t) dt` over domain with the quadrature of the quadrature context manager.
        """
        quad = get_options(self.namespace, OptionType.QUADRATURE).pairing.quadrature
        return inner(self.namespace, f, g, domain, quad)

    def _eigensolver(self) -> RankReducedEigensolver:
        return RankReducedEigensolver(
                solver=get_options(self.namespace, OptionType.EIGEN).solver,
                matrix_pairing=MatrixPairing(),
                kernel_pairing=get_options(self.namespace, OptionType.QUADRATURE).pairing)

    #-------------------------------------------------------------------------------------------------
    # io wrapper

    @overload
    def write(self, group: h5py.Group, obj: Rectangle) -> None: ...
    @overload
    def write(self, group: h5py.Group, obj: SamplingGrid) -> None: ...
    @overload
    def write(self, group: h5py.Group, obj: EigenResult[NDArray]) -> None: ...
    # implementation
    def write(self, group: h5py.Group, obj: Any) -> None:
        """
        Write a rectangle, a sampling grid or an eigenvalue result to a hdf5 group.
        """
        _write(group, obj)

    @overload
    def read(self, group: h5py.Group, cls: Type[Rectangle]) -> Rectangle: ...
    @overload
    def read(self, group: h5py.Group, cls: Type[SamplingGrid]) -> SamplingGrid: ...
    @overload
    def read(self, group: h5py.Group, cls: Type[EigenResult[NDArray]]) -> EigenResult[NDArray]: ...
    # implementation
    def read(self, group: h5py.Group, cls: Any) -> Any:
        """
        Read a rectangle, a sampling grid or an eigenvalue result from a hdf5 group.
        """
        if cls == EigenResult:
            return _read(group, EigenResult, self.namespace)
        return _read(group, cls)

    #-------------------------------------------------------------------------------------------------
    # default options

    def separable(
            self, *,
            tolerance: float = 1e-10,
            max_rank: int = 50,
            mode: ToleranceMode = "relative",
            grid_size: int | tuple[int, int] = 129,
            refinements: int = 2,
            refine_points: int = 9,
            chunk_size: int = 64,
            workers: int = 1,
            approximator: Optional[SeparableApproximator] = None,
            ) -> SeparableOptions:
        """
        Manager for separable approximations. grid_size sets the resolution of the pivot search
        and has to resolve the smallest features of the function. Alternatively a configured
        approximator can be provided.
        """
        if approximator is None:
            approximator = SeparableApproximator(
                    grid_size=grid_size,
                    refinements=refinements,
                    refine_points=refine_points,
                    chunk_size=chunk_size,
                    workers=workers)
        return SeparableOptions(
                namespace=self.namespace,
                approximator=approximator,
                tolerance=tolerance,
                max_rank=max_rank,
                mode=mode)

    def quadrature(
            self, *,
            npoints: int = 128,
            eps: Optional[float] = 1e-12,
            max_points: int = 4096,
            quadrature: Optional[Quadrature] = None,
            optimizer: OptimizeKind = DEFAULT_OPTIMIZER,
            ) -> QuadratureOptions:
        """
        Manager for inner products of factor functions. Starting from npoints Gauss-Legendre
        nodes (or the given quadrature) the nodes are doubled until the reduced matrix changes
        less than eps. eps=None disables the refinement.
        """
        if quadrature is None:
            quadrature = GaussLegendre(npoints=npoints)
        pairing = QuadraturePairing(quadrature=quadrature, eps=eps, max_points=max_points, optimizer=optimizer)
        return QuadratureOptions(namespace=self.namespace, pairing=pairing)

    def eigen(self, *, solver: Optional[MatrixEigenvalues] = None) -> EigenOptions:
        """
        Manager for the dense eigenvalue solver of reduced problems.
        """
        if solver is None:
            solver = EigvalsSolver()
        return EigenOptions(namespace=self.namespace, solver=solver)

    def set_options(self, options: SeparableOptions | QuadratureOptions | EigenOptions) -> None:
        """
        Set options globally. The options are stored per thread and are used by decompose
        and the eigenvalue methods.
        """
        set_options(options)

    def get_options(self, otype: OptionType) -> SeparableOptions | QuadratureOptions | EigenOptions:
        """
        Get the current options.
        """
        return get_options(self.namespace, otype)
