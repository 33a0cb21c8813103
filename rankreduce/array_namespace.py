# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

"""Structural types for array-API compatible arrays and namespaces."""

from typing import Protocol, Any

type Device = Any
type DType = Any

class ArrayLike(Protocol):

    @property
    def shape(self) -> tuple[int | None, ...]: ...
    @property
    def dtype(self) -> DType: ...
    @property
    def device(self) -> Device: ...
    @property
    def ndim(self) -> int: ...
    @property
    def T(self) -> Any: ...

    def __getitem__(self, key: Any, /) -> Any: ...
    def __setitem__(self, key: Any, value: Any, /) -> None: ...
    def __abs__(self) -> Any: ...
    def __neg__(self) -> Any: ...
    def __add__(self, other: Any, /) -> Any: ...
    def __sub__(self, other: Any, /) -> Any: ...
    def __mul__(self, other: Any, /) -> Any: ...
    def __truediv__(self, other: Any, /) -> Any: ...
    def __matmul__(self, other: Any, /) -> Any: ...

class ArrayNamespace[T](Protocol):
    """Subset of the array API standard namespace used by rankreduce."""

    linalg: Any
    newaxis: Any
    inf: float

    def asarray(self, obj: Any, /, *, dtype: Any = None, device: Any = None, copy: Any = None) -> T: ...
    def zeros(self, shape: Any, *, dtype: Any = None, device: Any = None) -> T: ...
    def empty(self, shape: Any, *, dtype: Any = None, device: Any = None) -> T: ...
    def linspace(self, start: float, stop: float, /, num: int, *, dtype: Any = None, device: Any = None) -> T: ...
    def reshape(self, x: T, /, shape: tuple[int, ...]) -> T: ...
    def concat(self, arrays: Any, /, *, axis: int | None = 0) -> T: ...
    def take(self, x: T, indices: T, /, *, axis: int | None = None) -> T: ...
    def abs(self, x: T, /) -> T: ...
    def argmax(self, x: T, /, *, axis: int | None = None) -> T: ...
    def max(self, x: T, /, *, axis: int | None = None) -> T: ...
    def sum(self, x: T, /, *, axis: int | None = None) -> T: ...
    def all(self, x: T, /) -> T: ...
    def isfinite(self, x: T, /) -> T: ...
    def finfo(self, type: Any, /) -> Any: ...
    def astype(self, x: T, dtype: Any, /) -> T: ...
    def matmul(self, x1: T, x2: T, /) -> T: ...
    def round(self, x: T, /) -> T: ...
    def sqrt(self, x: T, /) -> T: ...
    def __array_namespace_info__(self) -> Any: ...
