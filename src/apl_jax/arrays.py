"""Dense shaped arrays over a flat JAX vector, with trailing-axis agreement."""

from __future__ import annotations

import math
import os
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from itertools import product
from typing import Callable, Final

import jax
import jax.numpy as jnp

from .errors import APLDomainError, APLPromotionError, APLShapeError, format_shape

# Element widths are fixed once for the whole runtime: int64 and float64.
jax.config.update("jax_enable_x64", True)

MAX_ELEMENTS: Final[int] = max(1, int(os.environ.get("APL_JAX_MAX_ELEMENTS", str(2**27))))


class Kind(str, Enum):
    BOOLEAN = "boolean"
    INTEGER = "integer"
    DECIMAL = "decimal"

    @property
    def lattice_rank(self) -> int:
        return _LATTICE_RANK[self]

    @property
    def dtype(self):
        return _KIND_DTYPE[self]

    @classmethod
    def of_dtype(cls, dtype) -> "Kind":
        if jnp.issubdtype(dtype, jnp.bool_):
            return cls.BOOLEAN
        if jnp.issubdtype(dtype, jnp.integer):
            return cls.INTEGER
        if jnp.issubdtype(dtype, jnp.floating):
            return cls.DECIMAL
        raise APLPromotionError(f"No numeric kind for element type {dtype}")


_LATTICE_RANK: Final[dict[Kind, int]] = {
    Kind.BOOLEAN: 0,
    Kind.INTEGER: 1,
    Kind.DECIMAL: 2,
}

_KIND_DTYPE: Final[dict[Kind, object]] = {
    Kind.BOOLEAN: jnp.dtype("bool"),
    Kind.INTEGER: jnp.dtype("int64"),
    Kind.DECIMAL: jnp.dtype("float64"),
}


def check_widening(source: Kind, target: Kind) -> None:
    if target.lattice_rank < source.lattice_rank:
        raise APLPromotionError(f"Cannot narrow {source.value} to {target.value}")


def as_kind_data(data: object) -> jnp.ndarray:
    """Return ``data`` as a JAX array in the canonical dtype of its kind."""
    arr = jnp.asarray(data)
    dtype = Kind.of_dtype(arr.dtype).dtype
    if arr.dtype != dtype:
        arr = arr.astype(dtype)
    return arr


def flat_index(shape: Sequence[int], index: Sequence[int]) -> int:
    """Row-major offset of ``index`` within ``shape`` (mixed-radix fold)."""
    if len(index) != len(shape):
        raise APLShapeError(
            f"Index of length {len(index)} does not match array rank {len(shape)}",
            tuple(shape),
        )
    acc = 0
    for extent, i in zip(shape, index):
        if not 0 <= i < extent:
            raise APLShapeError(
                f"Index {tuple(index)} is out of bounds for shape {format_shape(tuple(shape))}",
                tuple(shape),
            )
        acc = acc * extent + i
    return acc


def odometer(shape: Sequence[int]) -> Iterator[tuple[int, ...]]:
    """Every index tuple within ``shape`` in row-major order."""
    return product(*(range(extent) for extent in shape))


def agrees(left: Sequence[int], right: Sequence[int]) -> bool:
    """True when the shorter shape is a trailing suffix of the longer one."""
    shorter, longer = sorted((tuple(left), tuple(right)), key=len)
    return longer[len(longer) - len(shorter) :] == shorter


def _tile(data: jnp.ndarray, size: int) -> jnp.ndarray:
    reps = size // data.size if data.size else 0
    return jnp.tile(data, reps)


@dataclass(frozen=True, eq=False)
class ShapedArray:
    shape: tuple[int, ...]
    data: jnp.ndarray

    def __post_init__(self) -> None:
        shape = tuple(int(extent) for extent in self.shape)
        if any(extent < 0 for extent in shape):
            raise APLShapeError(f"Negative extent in shape {shape}", shape)
        data = jnp.ravel(as_kind_data(self.data))
        if data.size != math.prod(shape):
            raise APLShapeError(
                f"Backing data of length {data.size} does not fill shape {format_shape(shape)}",
                shape,
            )
        object.__setattr__(self, "shape", shape)
        object.__setattr__(self, "data", data)

    @classmethod
    def from_values(cls, values, shape: Sequence[int] | None = None, kind: Kind | None = None) -> "ShapedArray":
        arr = jnp.asarray(values, dtype=None if kind is None else kind.dtype)
        return cls(tuple(arr.shape) if shape is None else tuple(shape), arr)

    @property
    def kind(self) -> Kind:
        return Kind.of_dtype(self.data.dtype)

    @property
    def rank(self) -> int:
        return len(self.shape)

    @property
    def size(self) -> int:
        return int(self.data.size)

    def get(self, index: Sequence[int]):
        return self.data[flat_index(self.shape, index)].item()

    def tolist(self):
        return jnp.reshape(self.data, self.shape).tolist()

    def map(self, fn: Callable[[jnp.ndarray], jnp.ndarray]) -> "ShapedArray":
        return ShapedArray(self.shape, fn(self.data))

    def map_atom_right(self, atom: jnp.ndarray, fn: Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]) -> "ShapedArray":
        return ShapedArray(self.shape, fn(self.data, atom))

    def map_atom_left(self, atom: jnp.ndarray, fn: Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]) -> "ShapedArray":
        return ShapedArray(self.shape, fn(atom, self.data))

    def agreement_map(self, other: "ShapedArray", fn: Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]) -> "ShapedArray":
        """Combine elementwise, tiling the lower-rank side over the leading axes."""
        if not agrees(self.shape, other.shape):
            raise APLShapeError(
                "Incompatible array shapes for dyadic operation: "
                f"{format_shape(self.shape)} and {format_shape(other.shape)}",
                self.shape,
                other.shape,
            )
        if self.rank == other.rank:
            return ShapedArray(self.shape, fn(self.data, other.data))
        if self.rank < other.rank:
            return ShapedArray(other.shape, fn(_tile(self.data, other.size), other.data))
        return ShapedArray(self.shape, fn(self.data, _tile(other.data, self.size)))

    def cast(self, kind: Kind) -> "ShapedArray":
        if kind is self.kind:
            return self
        check_widening(self.kind, kind)
        return ShapedArray(self.shape, self.data.astype(kind.dtype))

    def __repr__(self) -> str:
        return f"ShapedArray(shape={self.shape}, kind={self.kind.value}, data={self.data.tolist()})"


def iota(shape: Sequence[int]) -> ShapedArray:
    extents = tuple(int(extent) for extent in shape)
    if any(extent < 0 for extent in extents):
        raise APLShapeError(f"Negative extent in shape {extents}", extents)
    size = math.prod(extents)
    # An empty frame may still name an extent the backend cannot represent.
    if size > MAX_ELEMENTS or max(extents, default=0) > MAX_ELEMENTS:
        raise APLDomainError(f"Shape {format_shape(extents)} exceeds the limit of {MAX_ELEMENTS} elements")
    return ShapedArray(extents, jnp.arange(size, dtype=jnp.int64))
