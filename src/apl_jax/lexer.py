"""Table-driven tokenization of one line of J-style array notation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final

from .errors import APLLexError


class InputClass(Enum):
    OTHER = "other"
    WHITESPACE = "whitespace"
    LETTER = "letter"
    DIGIT = "digit"
    DOT = "dot"
    COLON = "colon"
    QUOTE = "quote"
    LINE_BREAK = "line_break"


class LexerState(Enum):
    INITIAL = "initial"
    WHITESPACE = "whitespace"
    OTHER = "other"
    ALPHANUMERIC = "alphanumeric"
    NUMERIC = "numeric"
    QUOTED = "quoted"
    DOUBLE_QUOTED = "double_quoted"
    LINE_BREAK = "line_break"


class LexerAction(Enum):
    NO_ACTION = "no_action"
    ADVANCE = "advance"
    EMIT_AND_ADVANCE = "emit_and_advance"
    EMIT_AND_RESET = "emit_and_reset"
    APPEND_AND_ADVANCE = "append_and_advance"
    APPEND_AND_RESET = "append_and_reset"
    STOP = "stop"

    @property
    def emits(self) -> bool:
        return self in (LexerAction.EMIT_AND_ADVANCE, LexerAction.EMIT_AND_RESET)

    @property
    def appends(self) -> bool:
        return self in (LexerAction.APPEND_AND_ADVANCE, LexerAction.APPEND_AND_RESET)

    @property
    def opens_span(self) -> bool:
        return self in (LexerAction.ADVANCE, LexerAction.EMIT_AND_ADVANCE, LexerAction.APPEND_AND_ADVANCE)


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    pos: int
    end: int
    parts: tuple[str, ...] = ()

    @property
    def value(self) -> str:
        """Literal text: string contents for STRING tokens, raw text otherwise."""
        if self.kind == "STRING":
            return unquote(self.text)
        return self.text


_CLASS_BY_CHAR: Final[dict[str, InputClass]] = {
    " ": InputClass.WHITESPACE,
    "\t": InputClass.WHITESPACE,
    "_": InputClass.DIGIT,
    ".": InputClass.DOT,
    ":": InputClass.COLON,
    '"': InputClass.QUOTE,
    "\n": InputClass.LINE_BREAK,
}
_CLASS_BY_CHAR.update({ch: InputClass.LETTER for ch in "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"})
_CLASS_BY_CHAR.update({ch: InputClass.DIGIT for ch in "0123456789"})


def classify(ch: str) -> InputClass:
    return _CLASS_BY_CHAR.get(ch, InputClass.OTHER)


# ``None`` stands for end of input.
Transitions = dict[tuple[LexerState, InputClass | None], tuple[LexerState, LexerAction]]


def _build_transitions() -> Transitions:
    table: Transitions = {}
    S = LexerState
    C = InputClass
    A = LexerAction
    line_break = (C.LINE_BREAK, None)

    def rule(states, classes, target: LexerState, action: LexerAction) -> None:
        for state in states:
            for cls in classes:
                table[(state, cls)] = (target, action)

    # No span pending: every non-blank character opens one.
    idle = (S.INITIAL, S.WHITESPACE)
    rule(idle, (C.OTHER, C.DOT, C.COLON), S.OTHER, A.ADVANCE)
    rule(idle, (C.WHITESPACE,), S.WHITESPACE, A.NO_ACTION)
    rule(idle, (C.LETTER,), S.ALPHANUMERIC, A.ADVANCE)
    rule(idle, (C.DIGIT,), S.NUMERIC, A.ADVANCE)
    rule(idle, (C.QUOTE,), S.QUOTED, A.ADVANCE)
    rule(idle, line_break, S.LINE_BREAK, A.ADVANCE)

    # Operator glyphs; dots and colons extend them (``*.``, ``=:``).
    rule((S.OTHER,), (C.OTHER,), S.OTHER, A.EMIT_AND_ADVANCE)
    rule((S.OTHER,), (C.WHITESPACE,), S.WHITESPACE, A.EMIT_AND_RESET)
    rule((S.OTHER,), (C.LETTER,), S.ALPHANUMERIC, A.EMIT_AND_ADVANCE)
    rule((S.OTHER,), (C.DIGIT,), S.NUMERIC, A.EMIT_AND_ADVANCE)
    rule((S.OTHER,), (C.DOT, C.COLON), S.OTHER, A.NO_ACTION)
    rule((S.OTHER,), (C.QUOTE,), S.QUOTED, A.EMIT_AND_ADVANCE)
    rule((S.OTHER,), line_break, S.LINE_BREAK, A.EMIT_AND_ADVANCE)

    # Names; a trailing dot or colon turns the span into a glyph (``i.``).
    rule((S.ALPHANUMERIC,), (C.OTHER,), S.OTHER, A.EMIT_AND_ADVANCE)
    rule((S.ALPHANUMERIC,), (C.WHITESPACE,), S.WHITESPACE, A.EMIT_AND_RESET)
    rule((S.ALPHANUMERIC,), (C.LETTER, C.DIGIT), S.ALPHANUMERIC, A.NO_ACTION)
    rule((S.ALPHANUMERIC,), (C.DOT, C.COLON), S.OTHER, A.NO_ACTION)
    rule((S.ALPHANUMERIC,), (C.QUOTE,), S.QUOTED, A.EMIT_AND_ADVANCE)
    rule((S.ALPHANUMERIC,), line_break, S.LINE_BREAK, A.EMIT_AND_ADVANCE)

    # Numerals absorb letters and dots unvalidated; leaving one appends to a
    # preceding NUMBER token so ``1 2 3`` becomes a single vector literal.
    rule((S.NUMERIC,), (C.OTHER,), S.OTHER, A.APPEND_AND_ADVANCE)
    rule((S.NUMERIC,), (C.WHITESPACE,), S.WHITESPACE, A.APPEND_AND_RESET)
    rule((S.NUMERIC,), (C.LETTER, C.DIGIT, C.DOT), S.NUMERIC, A.NO_ACTION)
    rule((S.NUMERIC,), (C.COLON,), S.OTHER, A.NO_ACTION)
    rule((S.NUMERIC,), (C.QUOTE,), S.QUOTED, A.APPEND_AND_ADVANCE)
    rule((S.NUMERIC,), line_break, S.LINE_BREAK, A.APPEND_AND_ADVANCE)

    # Strings; a doubled quote is an escaped quote inside the same span.
    rule((S.QUOTED,), tuple(InputClass), S.QUOTED, A.NO_ACTION)
    rule((S.QUOTED,), (C.QUOTE,), S.DOUBLE_QUOTED, A.NO_ACTION)
    rule((S.QUOTED,), (None,), S.LINE_BREAK, A.STOP)

    rule((S.DOUBLE_QUOTED,), (C.OTHER, C.DOT, C.COLON), S.OTHER, A.EMIT_AND_ADVANCE)
    rule((S.DOUBLE_QUOTED,), (C.WHITESPACE,), S.WHITESPACE, A.EMIT_AND_RESET)
    rule((S.DOUBLE_QUOTED,), (C.LETTER,), S.ALPHANUMERIC, A.EMIT_AND_ADVANCE)
    rule((S.DOUBLE_QUOTED,), (C.DIGIT,), S.NUMERIC, A.EMIT_AND_ADVANCE)
    rule((S.DOUBLE_QUOTED,), (C.QUOTE,), S.QUOTED, A.NO_ACTION)
    rule((S.DOUBLE_QUOTED,), line_break, S.LINE_BREAK, A.EMIT_AND_ADVANCE)

    # Statement boundary: the pending span is the EOL token itself.
    rule((S.LINE_BREAK,), (C.OTHER, C.DOT, C.COLON), S.OTHER, A.EMIT_AND_ADVANCE)
    rule((S.LINE_BREAK,), (C.WHITESPACE,), S.WHITESPACE, A.EMIT_AND_RESET)
    rule((S.LINE_BREAK,), (C.LETTER,), S.ALPHANUMERIC, A.EMIT_AND_ADVANCE)
    rule((S.LINE_BREAK,), (C.DIGIT,), S.NUMERIC, A.EMIT_AND_ADVANCE)
    rule((S.LINE_BREAK,), (C.QUOTE,), S.QUOTED, A.EMIT_AND_ADVANCE)
    rule((S.LINE_BREAK,), line_break, S.LINE_BREAK, A.EMIT_AND_ADVANCE)
    return table


_TOKEN_KIND_BY_STATE: Final[dict[LexerState, str]] = {
    LexerState.OTHER: "OPERATOR",
    LexerState.ALPHANUMERIC: "NAME",
    LexerState.NUMERIC: "NUMBER",
    LexerState.QUOTED: "STRING",
    LexerState.DOUBLE_QUOTED: "STRING",
    LexerState.LINE_BREAK: "EOL",
}


def _check_transitions(table: Transitions) -> Transitions:
    """Reject tables that are partial or could emit from a token-less state."""
    for state in LexerState:
        for cls in (*InputClass, None):
            if (state, cls) not in table:
                raise APLLexError(f"Transition table has no entry for {state.name}/{cls}", 0, 0)
            _, action = table[(state, cls)]
            if (action.emits or action.appends) and state not in _TOKEN_KIND_BY_STATE:
                raise APLLexError(f"Transition table emits from token-less state {state.name}", 0, 0)
    # Only the line-break state may be the last one standing at end of input.
    for (state, cls), (target, action) in table.items():
        if cls is None and action is not LexerAction.STOP and target is not LexerState.LINE_BREAK:
            raise APLLexError(f"End of input from {state.name} does not reach LINE_BREAK", 0, 0)
    return table


_TRANSITIONS: Final[Transitions] = _check_transitions(_build_transitions())


def transition(state: LexerState, cls: InputClass | None) -> tuple[LexerState, LexerAction]:
    return _TRANSITIONS[(state, cls)]


def unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        text = text[1:-1]
    return text.replace('""', '"')


def _emit(tokens: list[Token], source: str, start: int, end: int, state: LexerState) -> None:
    kind = _TOKEN_KIND_BY_STATE[state]
    text = source[start:end]
    tokens.append(Token(kind, text, start, end, (text,) if kind == "NUMBER" else ()))


def _append(tokens: list[Token], source: str, start: int, end: int, state: LexerState) -> None:
    if state is LexerState.NUMERIC and tokens and tokens[-1].kind == "NUMBER":
        last = tokens[-1]
        tokens[-1] = Token("NUMBER", source[last.pos : end], last.pos, end, (*last.parts, source[start:end]))
        return
    _emit(tokens, source, start, end, state)


def tokenize(source: str) -> list[Token]:
    tokens: list[Token] = []
    state = LexerState.INITIAL
    start = 0

    for i in range(len(source) + 1):
        cls = classify(source[i]) if i < len(source) else None
        target, action = _TRANSITIONS[(state, cls)]

        if action is LexerAction.STOP:
            raise APLLexError("Unterminated string literal", start, i)
        if action.emits:
            _emit(tokens, source, start, i, state)
        elif action.appends:
            _append(tokens, source, start, i, state)

        if action.opens_span:
            start = i
        state = target

    # End of input always lands in LINE_BREAK with its span still open.
    _emit(tokens, source, start, len(source), state)
    return tokens
