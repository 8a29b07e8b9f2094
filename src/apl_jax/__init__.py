"""apl-jax public API."""

from .arrays import Kind, ShapedArray, agrees, flat_index, iota, odometer
from .errors import (
    APLDomainError,
    APLError,
    APLEvaluationError,
    APLLexError,
    APLLiteralError,
    APLPromotionError,
    APLRuntimeError,
    APLShapeError,
    APLUnknownVerbError,
)
from .interpreter import Environment, evaluate, format_noun, interpret
from .lexer import InputClass, Token, classify, tokenize
from .literals import parse_atom, parse_vector
from .promote import MatchingOperands, Pairing, common_kind, promote_pair
from .values import Atom, Noun
from .verbs import Verb, VerbRegistry, default_registry, dyadic, monadic

__all__ = [
    "tokenize",
    "classify",
    "InputClass",
    "Token",
    "Kind",
    "ShapedArray",
    "Atom",
    "Noun",
    "agrees",
    "flat_index",
    "odometer",
    "iota",
    "common_kind",
    "promote_pair",
    "MatchingOperands",
    "Pairing",
    "parse_atom",
    "parse_vector",
    "Verb",
    "VerbRegistry",
    "default_registry",
    "dyadic",
    "monadic",
    "Environment",
    "interpret",
    "evaluate",
    "format_noun",
    "APLError",
    "APLLexError",
    "APLLiteralError",
    "APLRuntimeError",
    "APLShapeError",
    "APLUnknownVerbError",
    "APLPromotionError",
    "APLDomainError",
    "APLEvaluationError",
]
