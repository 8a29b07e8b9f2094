"""Promotion lattice: Boolean < Integer < Decimal."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .arrays import Kind
from .errors import APLPromotionError
from .values import Atom, Kernel, Noun, ValueKind, is_noun, kernel_for, value_info


class Pairing(str, Enum):
    ARRAY_ARRAY = "array_array"
    ARRAY_ATOM = "array_atom"
    ATOM_ARRAY = "atom_array"
    ATOM_ATOM = "atom_atom"

    @classmethod
    def of(cls, left: Noun, right: Noun) -> "Pairing":
        layout = (value_info(left).kind, value_info(right).kind)
        return {
            (ValueKind.ARRAY, ValueKind.ARRAY): cls.ARRAY_ARRAY,
            (ValueKind.ARRAY, ValueKind.ATOM): cls.ARRAY_ATOM,
            (ValueKind.ATOM, ValueKind.ARRAY): cls.ATOM_ARRAY,
            (ValueKind.ATOM, ValueKind.ATOM): cls.ATOM_ATOM,
        }[layout]


@dataclass(frozen=True, eq=False)
class MatchingOperands:
    """Two operands already promoted to one kind, ready for a dyad."""

    kind: Kind
    pairing: Pairing
    left: Noun
    right: Noun

    def dyad(self, fn: Kernel) -> Noun:
        left, right = self.left, self.right
        if self.pairing is Pairing.ARRAY_ARRAY:
            return left.agreement_map(right, fn)
        if self.pairing is Pairing.ARRAY_ATOM:
            return left.map_atom_right(right.value, fn)
        if self.pairing is Pairing.ATOM_ARRAY:
            return right.map_atom_left(left.value, fn)
        return Atom(fn(left.value, right.value))

    def dispatch(self, boolean: Kernel, integer: Kernel, decimal: Kernel) -> Noun:
        return self.dyad(kernel_for(self.kind, boolean, integer, decimal))


def common_kind(left: Kind, right: Kind) -> Kind:
    return max(left, right, key=lambda kind: kind.lattice_rank)


def promote(noun: Noun, kind: Kind) -> Noun:
    return noun.cast(kind)


def promote_pair(left: Noun, right: Noun) -> MatchingOperands:
    for side, operand in (("left", left), ("right", right)):
        if not is_noun(operand):
            raise APLPromotionError(f"Incompatible types for promotion: {side} operand is {type(operand).__name__}")
    kind = common_kind(left.kind, right.kind)
    left = promote(left, kind)
    right = promote(right, kind)
    return MatchingOperands(kind=kind, pairing=Pairing.of(left, right), left=left, right=right)
