"""Verb registry and the primitive verb catalog."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Callable, Final

import jax
import jax.numpy as jnp

from .arrays import Kind, iota
from .errors import APLDomainError, APLUnknownVerbError
from .promote import promote_pair
from .values import Atom, Kernel, Noun, map_noun, to_boolean

Monad = Callable[[Noun], Noun]
Dyad = Callable[[Noun, Noun], Noun]

_USE_JITTED_KERNELS: Final[bool] = os.environ.get("APL_JAX_DISABLE_JITTED_KERNELS", "0") != "1"


@dataclass(frozen=True)
class Verb:
    symbol: str
    monad: Monad | None = None
    dyad: Dyad | None = None


class VerbRegistry(Mapping[str, Verb]):
    """Read-only symbol table built once and shared by evaluators."""

    def __init__(self, verbs: Iterable[Verb]) -> None:
        table: dict[str, Verb] = {}
        for verb in verbs:
            if verb.symbol in table:
                raise ValueError(f"Duplicate verb symbol {verb.symbol!r}")
            table[verb.symbol] = verb
        self._verbs = MappingProxyType(table)

    def __getitem__(self, symbol: str) -> Verb:
        return self._verbs[symbol]

    def __iter__(self) -> Iterator[str]:
        return iter(self._verbs)

    def __len__(self) -> int:
        return len(self._verbs)

    def monad(self, symbol: str) -> Monad:
        verb = self._verbs.get(symbol)
        if verb is None or verb.monad is None:
            raise APLUnknownVerbError(symbol, "monadic")
        return verb.monad

    def dyad(self, symbol: str) -> Dyad:
        verb = self._verbs.get(symbol)
        if verb is None or verb.dyad is None:
            raise APLUnknownVerbError(symbol, "dyadic")
        return verb.dyad


def _kernel(fn: Kernel) -> Kernel:
    return jax.jit(fn) if _USE_JITTED_KERNELS else fn


def monadic(boolean: Kernel, integer: Kernel, decimal: Kernel) -> Monad:
    """Build a monad from one elementwise kernel per kind."""
    kernels = (_kernel(boolean), _kernel(integer), _kernel(decimal))

    def apply(right: Noun) -> Noun:
        return map_noun(right, *kernels)

    return apply


def dyadic(boolean: Kernel, integer: Kernel, decimal: Kernel) -> Dyad:
    """Build a dyad that promotes both operands, then applies one kernel per kind."""
    kernels = (_kernel(boolean), _kernel(integer), _kernel(decimal))

    def apply(left: Noun, right: Noun) -> Noun:
        return promote_pair(left, right).dispatch(*kernels)

    return apply


def _as_int(x: jnp.ndarray) -> jnp.ndarray:
    return x.astype(jnp.int64)


def _as_float(x: jnp.ndarray) -> jnp.ndarray:
    return x.astype(jnp.float64)


def _identity(x: jnp.ndarray) -> jnp.ndarray:
    return x


def _divide(a: jnp.ndarray, w: jnp.ndarray) -> jnp.ndarray:
    return _as_float(a) / _as_float(w)


def _boolean_and() -> Dyad:
    both = dyadic(jnp.logical_and, jnp.logical_and, jnp.logical_and)

    def apply(left: Noun, right: Noun) -> Noun:
        return both(to_boolean(left), to_boolean(right))

    return apply


def _iota(right: Noun) -> Noun:
    if right.kind is Kind.DECIMAL:
        raise APLDomainError("i. expects integer extents, got decimal")
    extents = right.cast(Kind.INTEGER)
    if isinstance(extents, Atom):
        shape = (extents.item(),)
    elif extents.rank == 1:
        shape = tuple(extents.tolist())
    else:
        raise APLDomainError(f"i. expects an atom or a list of extents, got rank {extents.rank}")
    if any(extent < 0 for extent in shape):
        raise APLDomainError(f"i. expects non-negative extents, got {shape}")
    return iota(shape)


def _same(right: Noun) -> Noun:
    return right


def _left(left: Noun, right: Noun) -> Noun:
    return left


def _right(left: Noun, right: Noun) -> Noun:
    return right


def primitive_verbs() -> tuple[Verb, ...]:
    return (
        Verb(
            "+",
            monad=monadic(_identity, _identity, _identity),
            dyad=dyadic(lambda a, w: _as_int(a) + _as_int(w), jnp.add, jnp.add),
        ),
        Verb(
            "-",
            monad=monadic(lambda w: -_as_int(w), jnp.negative, jnp.negative),
            dyad=dyadic(lambda a, w: _as_int(a) - _as_int(w), jnp.subtract, jnp.subtract),
        ),
        Verb(
            "*",
            monad=monadic(_identity, jnp.sign, lambda w: _as_int(jnp.sign(w))),
            dyad=dyadic(jnp.logical_and, jnp.multiply, jnp.multiply),
        ),
        Verb(
            "%",
            monad=monadic(lambda w: 1.0 / _as_float(w), lambda w: 1.0 / _as_float(w), lambda w: 1.0 / w),
            dyad=dyadic(_divide, _divide, jnp.divide),
        ),
        Verb("=", dyad=dyadic(jnp.equal, jnp.equal, jnp.equal)),
        Verb("*.", dyad=_boolean_and()),
        Verb("|", monad=monadic(_identity, jnp.abs, jnp.abs)),
        Verb("i.", monad=_iota),
        Verb("[", monad=_same, dyad=_left),
        Verb("]", monad=_same, dyad=_right),
    )


@lru_cache(maxsize=1)
def default_registry() -> VerbRegistry:
    return VerbRegistry(primitive_verbs())
