"""Exact label compatibility using BDDs (dd.autoref)."""
from __future__ import annotations
from typing import Mapping, Sequence
import dd.autoref as _bdd
from hoa2pg.hoa_model import (
    Expr, BoolConst, And, Or, Not, Fin, Inf, AccSet, APRef, AliasRef,
    MalformedAutomatonError, expr_to_str,
)
from hoa2pg.label_eval import Ternary


class LabelBdd:
    """Compiles label expressions into BDDs over the automaton's APs.

    Unlike the Kleene evaluator, a label such as (c & !c) over a free
    proposition c is recognised as unsatisfiable.
    """

    def __init__(self, num_aps: int, aliases: Mapping[str, Expr]):
        self.bdd = _bdd.BDD()
        self.var_names = [f"ap{i}" for i in range(num_aps)]
        for name in self.var_names:
            self.bdd.declare(name)
        self._aliases = aliases
        self._alias_bdds: dict[str, object] = {}
        self._cache: dict[Expr, object] = {}

    def to_bdd(self, expr: Expr, resolving: tuple[str, ...] = ()):
        """Build (or fetch) the BDD node of a label expression."""
        node = self._cache.get(expr)
        if node is None:
            node = self._build(expr, resolving)
            self._cache[expr] = node
        return node

    def _build(self, expr: Expr, resolving: tuple[str, ...]):
        if isinstance(expr, BoolConst):
            return self.bdd.true if expr.value else self.bdd.false
        if isinstance(expr, And):
            return self.to_bdd(expr.left, resolving) & self.to_bdd(expr.right, resolving)
        if isinstance(expr, Or):
            return self.to_bdd(expr.left, resolving) | self.to_bdd(expr.right, resolving)
        if isinstance(expr, Not):
            return ~self.to_bdd(expr.operand, resolving)
        if isinstance(expr, APRef):
            if not 0 <= expr.index < len(self.var_names):
                raise MalformedAutomatonError(
                    f"AP {expr.index} is out of range "
                    f"(AP count is {len(self.var_names)})"
                )
            return self.bdd.var(self.var_names[expr.index])
        if isinstance(expr, AliasRef):
            if expr.name in self._alias_bdds:
                return self._alias_bdds[expr.name]
            if expr.name in resolving:
                raise MalformedAutomatonError(
                    f"Alias '@{expr.name}' is defined in terms of itself"
                )
            if expr.name not in self._aliases:
                raise MalformedAutomatonError(f"Undefined alias '@{expr.name}'")
            node = self.to_bdd(self._aliases[expr.name], resolving + (expr.name,))
            self._alias_bdds[expr.name] = node
            return node
        if isinstance(expr, (Fin, Inf, AccSet)):
            raise MalformedAutomatonError(
                f"Acceptance construct {expr_to_str(expr)} inside a label"
            )
        raise TypeError(f"Unknown expression node: {expr!r}")

    def evaluate(self, label: Expr, relevant_aps: Sequence[int],
                 value: int) -> Ternary:
        """Exact counterpart of label_eval.evaluate_label.

        FALSE iff no valuation of the remaining APs satisfies the label,
        TRUE iff all of them do.
        """
        node = self.to_bdd(label)
        if relevant_aps:
            assignment = {
                self.var_names[ap]: bool((value >> k) & 1)
                for k, ap in enumerate(relevant_aps)
            }
            node = self.bdd.let(assignment, node)
        if node == self.bdd.false:
            return Ternary.FALSE
        if node == self.bdd.true:
            return Ternary.TRUE
        return Ternary.UNKNOWN
