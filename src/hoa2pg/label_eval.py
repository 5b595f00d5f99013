"""Three-valued evaluation of transition labels under partial valuations."""
from __future__ import annotations
from enum import IntEnum
from typing import Mapping, Sequence
from hoa2pg.hoa_model import (
    Expr, BoolConst, And, Or, Not, Fin, Inf, AccSet, APRef, AliasRef,
    MalformedAutomatonError, expr_to_str,
)


class Ternary(IntEnum):
    """Kleene truth values; negation is arithmetic negation."""
    FALSE = -1
    UNKNOWN = 0
    TRUE = 1

    def negate(self) -> Ternary:
        return Ternary(-self.value)


def evaluate_label(label: Expr,
                   aliases: Mapping[str, Expr],
                   relevant_aps: Sequence[int],
                   value: int) -> Ternary:
    """Decide a label under a valuation of some of the atomic propositions.

    Args:
        label: Label expression tree.
        aliases: Alias name -> bound expression.
        relevant_aps: AP indices whose values are fixed.
        value: Bitmask whose k-th bit is the value of relevant_aps[k].

    Returns:
        Ternary.TRUE or Ternary.FALSE if the fixed APs settle the label,
        Ternary.UNKNOWN if it still depends on the other APs.
    """
    positions = {ap: k for k, ap in enumerate(relevant_aps)}
    return _eval(label, aliases, positions, value, ())


def _eval(expr: Expr, aliases: Mapping[str, Expr], positions: dict[int, int],
          value: int, resolving: tuple[str, ...]) -> Ternary:
    if isinstance(expr, BoolConst):
        return Ternary.TRUE if expr.value else Ternary.FALSE
    if isinstance(expr, And):
        left = _eval(expr.left, aliases, positions, value, resolving)
        right = _eval(expr.right, aliases, positions, value, resolving)
        if Ternary.FALSE in (left, right):
            return Ternary.FALSE
        if Ternary.UNKNOWN in (left, right):
            return Ternary.UNKNOWN
        return Ternary.TRUE
    if isinstance(expr, Or):
        left = _eval(expr.left, aliases, positions, value, resolving)
        right = _eval(expr.right, aliases, positions, value, resolving)
        if Ternary.TRUE in (left, right):
            return Ternary.TRUE
        if Ternary.UNKNOWN in (left, right):
            return Ternary.UNKNOWN
        return Ternary.FALSE
    if isinstance(expr, Not):
        return _eval(expr.operand, aliases, positions, value, resolving).negate()
    if isinstance(expr, APRef):
        k = positions.get(expr.index)
        if k is None:
            return Ternary.UNKNOWN
        return Ternary.TRUE if (value >> k) & 1 else Ternary.FALSE
    if isinstance(expr, AliasRef):
        if expr.name in resolving:
            raise MalformedAutomatonError(
                f"Alias '@{expr.name}' is defined in terms of itself"
            )
        if expr.name not in aliases:
            raise MalformedAutomatonError(f"Undefined alias '@{expr.name}'")
        return _eval(aliases[expr.name], aliases, positions, value,
                     resolving + (expr.name,))
    if isinstance(expr, (Fin, Inf, AccSet)):
        raise MalformedAutomatonError(
            f"Acceptance construct {expr_to_str(expr)} inside a label"
        )
    raise TypeError(f"Unknown expression node: {expr!r}")
