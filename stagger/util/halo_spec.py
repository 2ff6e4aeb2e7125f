import dataclasses
from typing import Any, Tuple

from .quantity import Quantity


@dataclasses.dataclass(frozen=True)
class QuantityHaloSpec:
    """Describe the memory to be exchanged.

    Covers the layout of both cell-centered and face-centered quantities.
    `n_halo` is zero along axes with a single cell, which are never exchanged.
    """

    n_halo: Tuple[int, ...]
    shape: Tuple[int, ...]
    origin: Tuple[int, ...]
    extent: Tuple[int, ...]
    n_cells: Tuple[int, ...]
    interface: Tuple[bool, ...]
    dtype: Any

    @classmethod
    def from_quantity(cls, quantity: Quantity, n_points: int) -> "QuantityHaloSpec":
        n_cells = tuple(quantity.n_cells(axis) for axis in range(len(quantity.dims)))
        n_halo = tuple(0 if n == 1 else n_points for n in n_cells)
        for axis, (halo, origin) in enumerate(zip(n_halo, quantity.origin)):
            if halo > origin:
                raise ValueError(
                    f"cannot update {halo} halo points along {quantity.dims[axis]}, "
                    f"quantity only has {origin}"
                )
        return cls(
            n_halo=n_halo,
            shape=quantity.data.shape,
            origin=quantity.origin,
            extent=quantity.extent,
            n_cells=n_cells,
            interface=tuple(
                quantity.is_interface(axis) for axis in range(len(quantity.dims))
            ),
            dtype=quantity.data.dtype,
        )
