"""Runtime value model: atoms, nouns and validators."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Union

import jax.numpy as jnp

from .arrays import Kind, ShapedArray, as_kind_data, check_widening
from .errors import APLShapeError


@dataclass(frozen=True, eq=False)
class Atom:
    """Rank-0 scalar of one numeric kind."""

    value: jnp.ndarray

    def __post_init__(self) -> None:
        value = as_kind_data(self.value)
        if value.ndim != 0:
            raise APLShapeError(f"Atom value must be rank 0, got shape {tuple(value.shape)}", tuple(value.shape))
        object.__setattr__(self, "value", value)

    @classmethod
    def of(cls, value: bool | int | float) -> "Atom":
        return cls(jnp.asarray(value))

    @property
    def kind(self) -> Kind:
        return Kind.of_dtype(self.value.dtype)

    @property
    def shape(self) -> tuple[int, ...]:
        return ()

    @property
    def rank(self) -> int:
        return 0

    def item(self) -> bool | int | float:
        return self.value.item()

    def map(self, fn: Callable[[jnp.ndarray], jnp.ndarray]) -> "Atom":
        return Atom(fn(self.value))

    def cast(self, kind: Kind) -> "Atom":
        if kind is self.kind:
            return self
        check_widening(self.kind, kind)
        return Atom(self.value.astype(kind.dtype))

    def __repr__(self) -> str:
        return f"Atom(kind={self.kind.value}, value={self.item()!r})"


Noun = Union[ShapedArray, Atom]

Kernel = Callable[..., jnp.ndarray]


class ValueKind(str, Enum):
    ATOM = "atom"
    ARRAY = "array"


@dataclass(frozen=True)
class ValueInfo:
    kind: ValueKind
    element: Kind
    shape: tuple[int, ...]
    rank: int


def is_noun(value: object) -> bool:
    return isinstance(value, (ShapedArray, Atom))


def value_info(value: Noun) -> ValueInfo:
    kind = ValueKind.ATOM if isinstance(value, Atom) else ValueKind.ARRAY
    return ValueInfo(kind=kind, element=value.kind, shape=value.shape, rank=value.rank)


def validate_noun(value: object, *, where: str = "value") -> None:
    if not is_noun(value):
        raise TypeError(f"{where} has unsupported runtime type {type(value).__name__}")


def kernel_for(kind: Kind, boolean: Kernel, integer: Kernel, decimal: Kernel) -> Kernel:
    if kind is Kind.BOOLEAN:
        return boolean
    if kind is Kind.INTEGER:
        return integer
    return decimal


def map_noun(noun: Noun, boolean: Kernel, integer: Kernel, decimal: Kernel) -> Noun:
    """Apply the kernel matching the noun's kind to every element."""
    return noun.map(kernel_for(noun.kind, boolean, integer, decimal))


def to_boolean(noun: Noun) -> Noun:
    """Boolean view of a noun: nonzero elements are true."""
    return map_noun(noun, lambda w: w, lambda w: w != 0, lambda w: w != 0.0)
