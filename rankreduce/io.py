# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Optional, Type, overload
import h5py
import numpy as np

from .backend import ArrayNamespace, ArrayLike, to_device
from .domain import Domain, Rectangle
from .samplinggrid import SamplingGrid
from .eigenresult import EigenResult

@overload
def write(group: h5py.Group, obj: Domain) -> None: ...
@overload
def write(group: h5py.Group, obj: Rectangle) -> None: ...
@overload
def write(group: h5py.Group, obj: SamplingGrid) -> None: ...
@overload
def write(group: h5py.Group, obj: EigenResult) -> None: ...
#implementation
def write(group: h5py.Group, obj: Any) -> None:
    if isinstance(obj, Domain):
        group.attrs["lower"] = obj.lower
        group.attrs["upper"] = obj.upper
    elif isinstance(obj, Rectangle):
        write(group.create_group("x"), obj.xdomain)
        write(group.create_group("y"), obj.ydomain)
    elif isinstance(obj, SamplingGrid):
        group.attrs["sizes"] = list(obj.sizes)
        write(group.create_group("rectangle"), obj.rectangle)
    elif isinstance(obj, EigenResult):
        group.attrs["implicit_zeros"] = obj.implicit_zeros
        group.attrs["approximate"] = obj.approximate
        group.create_dataset("eigenvalues", data=np.asarray(to_device(obj.eigenvalues, "cpu")))
    else:
        raise ValueError("Invalid object.")

@overload
def read(group: h5py.Group, cls: Type[Domain]) -> Domain: ...
@overload
def read(group: h5py.Group, cls: Type[Rectangle]) -> Rectangle: ...
@overload
def read(group: h5py.Group, cls: Type[SamplingGrid]) -> SamplingGrid: ...
@overload
def read[T: ArrayLike](group: h5py.Group, cls: Type[EigenResult[T]], xp: Optional[ArrayNamespace[T]]) -> EigenResult[T]: ...
#implementation
def read(group: h5py.Group, cls: Any, xp: Optional[ArrayNamespace] = None) -> Any:
    if cls == Domain:
        return Domain(float(get_attr(group, "lower")),
                      float(get_attr(group, "upper")))
    elif cls == Rectangle:
        return Rectangle(read(get_group(group, "x"), Domain),
                         read(get_group(group, "y"), Domain))
    elif cls == SamplingGrid:
        sizes = [int(s) for s in get_attr(group, "sizes")]
        return SamplingGrid(read(get_group(group, "rectangle"), Rectangle), sizes)
    elif cls == EigenResult:
        if xp is None:
            raise ValueError("Array namespace must be provided to read EigenResult.")
        dataset = group["eigenvalues"]
        assert isinstance(dataset, h5py.Dataset)
        return EigenResult(eigenvalues=xp.asarray(np.asarray(dataset)),
                           implicit_zeros=int(get_attr(group, "implicit_zeros")),
                           approximate=bool(get_attr(group, "approximate")))

    raise ValueError("Invalid class.")

def get_attr(group: h5py.Group, name: str) -> Any:
    return group.attrs[name]

def get_group(group: h5py.Group, name: str) -> h5py.Group:
    sub = group[name]
    assert isinstance(sub, h5py.Group)
    return sub
