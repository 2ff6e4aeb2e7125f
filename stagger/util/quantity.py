import dataclasses
from typing import Sequence, Tuple, Union

import numpy as np

from . import constants


__all__ = ["Quantity", "QuantityMetadata"]


@dataclasses.dataclass
class QuantityMetadata:
    origin: Tuple[int, ...]
    "the start of the computational domain"
    extent: Tuple[int, ...]
    "the shape of the computational domain"
    dims: Tuple[str, ...]
    "names of each dimension"
    units: str
    "units of the quantity"
    dtype: type
    "dtype of the data in the ndarray"


def _shift_slice(entry: slice, start: int, stop: int) -> slice:
    """Shift a slice given relative to the compute domain into array indices,
    with defaults at the compute domain bounds."""
    if entry.step not in (None, 1):
        raise IndexError("strided indexing of quantity views is not supported")
    new_start = start if entry.start is None else entry.start + start
    new_stop = stop if entry.stop is None else entry.stop + start
    return slice(new_start, new_stop)


class BoundedArrayView:
    """
    Indexing relative to the computational domain of an array.

    Indexing on the object itself (view[:]) is offset by the origin, and
    default start and end indices are the start and end of the compute domain.
    Negative indices address the halo, so view[-1] along a dimension is the
    last halo point before the compute domain, not the last array element.
    """

    def __init__(
        self, array, dims: Sequence[str], origin: Sequence[int], extent: Sequence[int]
    ):
        self._data = array
        self._dims = tuple(dims)
        self._origin = tuple(origin)
        self._extent = tuple(extent)

    @property
    def origin(self) -> Tuple[int, ...]:
        """the start of the computational domain"""
        return self._origin

    @property
    def extent(self) -> Tuple[int, ...]:
        """the shape of the computational domain"""
        return self._extent

    def __getitem__(self, index):
        return self._data[self._get_compute_index(index)]

    def __setitem__(self, index, value):
        self._data[self._get_compute_index(index)] = value

    def _normalize_index(self, index) -> tuple:
        if not isinstance(index, (tuple, list)):
            index = (index,)
        index = tuple(index)
        if len(index) > len(self._dims):
            raise IndexError(
                f"{len(index)} is too many indices for a "
                f"{len(self._dims)}-dimensional quantity"
            )
        return index + (slice(None, None),) * (len(self._dims) - len(index))

    def _get_compute_index(self, index):
        shifted_index = []
        for entry, origin, extent in zip(
            self._normalize_index(index), self.origin, self.extent
        ):
            if isinstance(entry, slice):
                shifted_index.append(_shift_slice(entry, origin, origin + extent))
            else:
                shifted_index.append(entry + origin)
        return tuple(shifted_index)


def _validate_quantity_property_lengths(shape, dims, origin, extent):
    n_dims = len(shape)
    for var, desc in (
        (dims, "dimension names"),
        (origin, "origins"),
        (extent, "extents"),
    ):
        if len(var) != n_dims:
            raise ValueError(
                f"received {len(var)} {desc} for {n_dims} dimensions: {var}"
            )


class Quantity:
    """
    Data container for a field on the staggered grid, together with
    the metadata needed to find its compute domain and halo.
    """

    def __init__(
        self,
        data: Union[np.ndarray, int, float, list],
        dims: Sequence[str],
        units: str,
        origin: Sequence[int] = None,
        extent: Sequence[int] = None,
    ):
        """
        Initialize a Quantity.

        Args:
            data: ndarray containing the underlying data
            dims: dimension names for each axis
            units: units of the quantity
            origin: first point in data within the computational domain
            extent: number of points along each axis within the computational domain
        """
        if isinstance(data, (int, float, list)):
            data = np.asarray(data)
        if origin is None:
            origin = (0,) * len(dims)  # default origin at origin of array
        else:
            origin = tuple(int(i) for i in origin)
        if extent is None:
            extent = tuple(length - start for length, start in zip(data.shape, origin))
        else:
            extent = tuple(int(i) for i in extent)
        _validate_quantity_property_lengths(data.shape, dims, origin, extent)
        for dim in dims:
            if dim not in constants.SPATIAL_DIMS:
                raise ValueError(f"unexpected dimension name {dim}")
        self._data = data
        self._metadata = QuantityMetadata(
            origin=origin,
            extent=extent,
            dims=tuple(dims),
            units=units,
            dtype=data.dtype,
        )
        self._compute_domain_view = BoundedArrayView(
            self._data, self.dims, self.origin, self.extent
        )

    def __repr__(self):
        return (
            f"Quantity(\n    data=\n{self.data},\n    dims={self.dims},\n"
            f"    units={self.units},\n    origin={self.origin},\n"
            f"    extent={self.extent}\n)"
        )

    @property
    def metadata(self) -> QuantityMetadata:
        return self._metadata

    @property
    def units(self) -> str:
        """units of the quantity"""
        return self.metadata.units

    @property
    def dims(self) -> Tuple[str, ...]:
        """names of each dimension"""
        return self.metadata.dims

    @property
    def view(self) -> BoundedArrayView:
        """a view into the computational domain of the underlying data"""
        return self._compute_domain_view

    @property
    def data(self) -> np.ndarray:
        """the underlying array of data"""
        return self._data

    @property
    def origin(self) -> Tuple[int, ...]:
        """the start of the computational domain"""
        return self.metadata.origin

    @property
    def extent(self) -> Tuple[int, ...]:
        """the shape of the computational domain"""
        return self.metadata.extent

    @property
    def compute_slices(self) -> Tuple[slice, ...]:
        """slices of data covering the computational domain"""
        return tuple(
            slice(origin, origin + extent)
            for origin, extent in zip(self.origin, self.extent)
        )

    def is_interface(self, axis: int) -> bool:
        """whether the quantity is face-centered along axis"""
        return self.dims[axis] in constants.INTERFACE_DIMS

    def n_cells(self, axis: int) -> int:
        """number of cells spanned along axis, one less than the extent for
        face-centered dimensions"""
        if self.is_interface(axis):
            return self.extent[axis] - 1
        else:
            return self.extent[axis]
