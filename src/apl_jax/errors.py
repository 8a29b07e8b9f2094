"""Structured error types for lexer/literal/runtime separation."""

from __future__ import annotations

from dataclasses import dataclass


class APLError(Exception):
    """Base class for structured apl-jax errors."""


@dataclass(frozen=True)
class APLLexError(APLError):
    """Tokenizer failure with the offending source span."""

    message: str
    start: int
    end: int

    def __str__(self) -> str:
        return f"{self.message} at span [{self.start}, {self.end})"


class APLLiteralError(APLError):
    """A numeral could not be turned into a noun."""

    def __init__(self, text: str) -> None:
        super().__init__(f"Failed to parse {text!r} as a number")
        self.text = text


class APLRuntimeError(APLError):
    """Generic runtime failure after successful lexing."""


class APLShapeError(APLRuntimeError):
    """Runtime shape/rank/index compatibility failure."""

    def __init__(self, message: str, *shapes: tuple[int, ...]) -> None:
        super().__init__(message)
        self.shapes = shapes


class APLUnknownVerbError(APLRuntimeError):
    """No function registered for a symbol at the attempted arity."""

    def __init__(self, symbol: str, arity: str) -> None:
        super().__init__(f"Unknown {arity} verb {symbol!r}")
        self.symbol = symbol
        self.arity = arity


class APLPromotionError(APLRuntimeError):
    """Operands have no common kind in the promotion lattice."""


class APLDomainError(APLRuntimeError):
    """Argument value outside the domain of a verb."""


class APLEvaluationError(APLRuntimeError):
    """Failure of the flat right-to-left evaluator."""


def causal_chain(err: BaseException) -> list[str]:
    """Messages from ``err`` down its ``__cause__`` chain, outermost first."""
    messages: list[str] = []
    current: BaseException | None = err
    while current is not None:
        messages.append(str(current) or type(current).__name__)
        current = current.__cause__
    return messages


def format_shape(shape: tuple[int, ...]) -> str:
    return " ".join(str(extent) for extent in shape) or "(scalar)"


def classify_runtime_exception(err: Exception) -> APLRuntimeError:
    """Best-effort mapping of a backend failure onto the runtime error types."""
    message = str(err) or type(err).__name__
    lowered = message.lower()

    if isinstance(err, MemoryError) or "resource_exhausted" in lowered or "out of memory" in lowered:
        return APLDomainError(f"Result does not fit in memory: {message}")

    shape_markers = ("shape", "rank", "dimension", "extent", "broadcast", "reshape")
    if any(marker in lowered for marker in shape_markers):
        return APLShapeError(message)

    return APLRuntimeError(message)
