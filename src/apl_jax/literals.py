"""Numeral parsing: NUMBER tokens to atoms and rank-1 arrays."""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from typing import Final

import jax.numpy as jnp

from .arrays import Kind, ShapedArray
from .errors import APLLiteralError
from .lexer import Token
from .values import Atom, Noun

_INT64_MIN: Final[int] = -(2**63)
_INT64_MAX: Final[int] = 2**63 - 1

_NUMERAL_RE = re.compile(
    r"""
    ^
    (?P<sign>_?)                            # J spells negation with an underscore
    (?P<whole>[0-9]+)?
    (?:\.(?P<fraction>[0-9]*))?
    (?:
        [eE]
        (?P<exp_sign>_?)
        (?P<exponent>[0-9]+)
    )?
    $
    """,
    re.VERBOSE,
)


def parse_numeral(text: str) -> int | float:
    """Parse one numeral, raising ``ValueError`` on invalid syntax."""
    if text == "_":
        return math.inf
    if text == "__":
        return -math.inf

    m = _NUMERAL_RE.match(text)
    if m is None or (m.group("whole") is None and not m.group("fraction")):
        raise ValueError(f"invalid numeral syntax {text!r}")

    sign = "-" if m.group("sign") else ""
    whole = m.group("whole") or "0"
    if m.group("fraction") is None and m.group("exponent") is None:
        value = int(sign + whole)
        if not _INT64_MIN <= value <= _INT64_MAX:
            raise ValueError(f"integer {text!r} does not fit in 64 bits")
        return value

    fraction = m.group("fraction") or "0"
    exponent = ""
    if m.group("exponent") is not None:
        exp_sign = "-" if m.group("exp_sign") else ""
        exponent = f"e{exp_sign}{m.group('exponent')}"
    return float(f"{sign}{whole}.{fraction}{exponent}")


def parse_atom(text: str) -> Atom:
    try:
        value = parse_numeral(text)
    except ValueError as exc:
        raise APLLiteralError(text) from exc
    return Atom.of(value)


def parse_vector(parts: Sequence[str]) -> ShapedArray:
    values: list[int | float] = []
    for text in parts:
        try:
            values.append(parse_numeral(text))
        except ValueError as exc:
            raise APLLiteralError(text) from exc
    kind = Kind.DECIMAL if any(isinstance(value, float) for value in values) else Kind.INTEGER
    return ShapedArray((len(values),), jnp.asarray(values, dtype=kind.dtype))


def number_literal(token: Token) -> Noun:
    """Noun for a NUMBER token: an atom for one fragment, a list otherwise."""
    if token.kind != "NUMBER":
        raise ValueError(f"Expected a NUMBER token, got {token.kind}")
    if len(token.parts) == 1:
        return parse_atom(token.parts[0])
    return parse_vector(token.parts)
