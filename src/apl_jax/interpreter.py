"""Flat right-to-left evaluator over token streams."""

from __future__ import annotations

import math
from collections.abc import Iterator, MutableMapping
from typing import Final

import jax

from .arrays import ShapedArray
from .errors import APLEvaluationError, APLRuntimeError, classify_runtime_exception
from .lexer import Token, tokenize
from .literals import number_literal
from .values import Atom, Noun, validate_noun
from .verbs import VerbRegistry, default_registry

_NOUN_TOKENS: Final[frozenset[str]] = frozenset({"NUMBER", "NAME"})
_ASSIGN: Final[str] = "=:"

# Failures raised by the array backend rather than by a verb itself.
_BACKEND_ERRORS: Final[tuple[type[BaseException], ...]] = (
    jax.errors.JaxRuntimeError,
    MemoryError,
    OverflowError,
    TypeError,
    ValueError,
)


class Environment(MutableMapping[str, Noun]):
    """Name to noun bindings that persist across evaluated lines."""

    def __init__(self, data: MutableMapping[str, Noun] | None = None) -> None:
        self._values: dict[str, Noun] = {}
        if data is not None:
            for name, value in data.items():
                self[name] = value

    def __getitem__(self, name: str) -> Noun:
        return self._values[name]

    def __setitem__(self, name: str, value: Noun) -> None:
        validate_noun(value, where=f"env[{name!r}]")
        self._values[name] = value

    def __delitem__(self, name: str) -> None:
        del self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)


def split_statements(tokens: list[Token]) -> list[list[Token]]:
    statements: list[list[Token]] = [[]]
    for token in tokens:
        if token.kind == "EOL":
            statements.append([])
        else:
            statements[-1].append(token)
    return [statement for statement in statements if statement]


def _noun_from_token(token: Token, env: MutableMapping[str, Noun]) -> Noun:
    if token.kind == "NUMBER":
        return number_literal(token)
    if token.kind == "NAME":
        if token.text not in env:
            raise APLEvaluationError(f"Undefined name {token.text!r} at index {token.pos}")
        return env[token.text]
    if token.kind == "STRING":
        raise APLEvaluationError(f"String literal at index {token.pos} is not a noun")
    raise APLEvaluationError(f"Expected a noun at index {token.pos}, found {token.kind} {token.text!r}")


def _apply(token: Token, valence: str, fn, *args: Noun) -> Noun:
    context = f"{valence} {token.text!r} failed at index {token.pos}"
    try:
        return fn(*args)
    except APLRuntimeError as exc:
        raise APLEvaluationError(context) from exc
    except _BACKEND_ERRORS as exc:
        raise APLEvaluationError(context) from classify_runtime_exception(exc)


def _interpret_statement(tokens: list[Token], env: MutableMapping[str, Noun], registry: VerbRegistry) -> Noun:
    if len(tokens) >= 2 and tokens[0].kind == "NAME" and tokens[1].kind == "OPERATOR" and tokens[1].text == _ASSIGN:
        if len(tokens) == 2:
            raise APLEvaluationError(f"Nothing to assign to {tokens[0].text!r}")
        value = _interpret_statement(tokens[2:], env, registry)
        env[tokens[0].text] = value
        return value

    pending = list(tokens)
    right = _noun_from_token(pending.pop(), env)

    while pending:
        token = pending.pop()
        if token.kind != "OPERATOR":
            raise APLEvaluationError(f"Nonsensical token {token.kind} {token.text!r} at index {token.pos}")
        if pending and pending[-1].kind in _NOUN_TOKENS:
            dyad = registry.dyad(token.text)
            left = _noun_from_token(pending.pop(), env)
            right = _apply(token, "Dyadic", dyad, left, right)
        else:
            monad = registry.monad(token.text)
            right = _apply(token, "Monadic", monad, right)

    return right


def interpret(
    tokens: list[Token],
    env: MutableMapping[str, Noun],
    registry: VerbRegistry | None = None,
) -> Noun | None:
    """Evaluate each statement in order; return the last value, if any."""
    registry = default_registry() if registry is None else registry
    result: Noun | None = None
    for statement in split_statements(tokens):
        result = _interpret_statement(statement, env, registry)
    return result


def evaluate(
    source: str,
    env: MutableMapping[str, Noun] | None = None,
    registry: VerbRegistry | None = None,
) -> Noun | None:
    """Tokenize and interpret ``source``; bindings land in ``env`` when given."""
    return interpret(tokenize(source), Environment() if env is None else env, registry)


def _format_scalar(value: bool | int | float) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        if math.isnan(value):
            return "_."
        if math.isinf(value):
            return "_" if value > 0 else "__"
        if value.is_integer() and abs(value) < 1e16:
            text = str(int(value))
        else:
            mantissa, marker, exponent = repr(value).partition("e")
            text = f"{mantissa}e{int(exponent)}" if marker else mantissa
    else:
        text = str(value)
    # Negative mantissas and exponents both use the numeral spelling.
    return text.replace("-", "_")


def _format_cells(cells, rank: int, width: int) -> str:
    if rank == 1:
        return " ".join(_format_scalar(value).rjust(width) for value in cells)
    separator = "\n" * (rank - 1)
    return separator.join(_format_cells(cell, rank - 1, width) for cell in cells)


def format_noun(noun: Noun) -> str:
    """Render a noun the way a J session displays it."""
    if isinstance(noun, Atom):
        return _format_scalar(noun.item())
    assert isinstance(noun, ShapedArray)
    if noun.rank == 0:
        return _format_scalar(noun.data[0].item())
    width = max((len(_format_scalar(value)) for value in noun.data.tolist()), default=0)
    return _format_cells(noun.tolist(), noun.rank, width)
