"""Frozen dataclasses for the in-memory HOA automaton representation."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Union


class MalformedAutomatonError(Exception):
    """Raised when a parsed automaton breaks an invariant the game construction relies on."""
    exit_code = 2


# --- Expression tree (labels and acceptance conditions) ---

@dataclass(frozen=True)
class BoolConst:
    value: bool

@dataclass(frozen=True)
class And:
    left: Expr
    right: Expr

@dataclass(frozen=True)
class Or:
    left: Expr
    right: Expr

@dataclass(frozen=True)
class Not:
    operand: Expr

@dataclass(frozen=True)
class Fin:
    """Fin(operand) where operand is an AccSet or Not(AccSet)."""
    operand: Expr

@dataclass(frozen=True)
class Inf:
    operand: Expr

@dataclass(frozen=True)
class AccSet:
    index: int

@dataclass(frozen=True)
class APRef:
    index: int

@dataclass(frozen=True)
class AliasRef:
    """Reference to an alias by name (without the leading '@')."""
    name: str

Expr = Union[BoolConst, And, Or, Not, Fin, Inf, AccSet, APRef, AliasRef]


# --- Automaton ---

@dataclass(frozen=True)
class Alias:
    name: str
    expr: Expr


@dataclass(frozen=True)
class Transition:
    successors: tuple[int, ...]
    label: Optional[Expr] = None
    acc_sig: Optional[tuple[int, ...]] = None


@dataclass(frozen=True)
class State:
    id: int
    name: Optional[str] = None
    label: Optional[Expr] = None
    acc_sig: Optional[tuple[int, ...]] = None
    transitions: tuple[Transition, ...] = ()

    def effective_label(self, trans: Transition) -> Optional[Expr]:
        """State-level label overrides the transition's own label."""
        return self.label if self.label is not None else trans.label

    def effective_acc_sig(self, trans: Transition) -> Optional[tuple[int, ...]]:
        return self.acc_sig if self.acc_sig is not None else trans.acc_sig


@dataclass(frozen=True)
class HoaAutomaton:
    """A parsed HOA automaton. All tuples keep the order of the input."""
    num_states: int = 0
    aps: tuple[str, ...] = ()
    controllable_aps: tuple[int, ...] = ()
    start: tuple[int, ...] = ()
    acc_name: Optional[str] = None
    acc_name_params: tuple[str, ...] = ()
    num_acc_sets: int = 0
    acceptance: Optional[Expr] = None
    properties: tuple[str, ...] = ()
    aliases: tuple[Alias, ...] = ()
    states: tuple[State, ...] = ()
    version: str = "v1"
    name: Optional[str] = None
    tool_name: Optional[str] = None
    tool_version: Optional[str] = None

    @property
    def num_aps(self) -> int:
        return len(self.aps)

    def uncontrollable_aps(self) -> list[int]:
        """AP indices not declared controllable, in increasing order."""
        cnt = set(self.controllable_aps)
        return [i for i in range(self.num_aps) if i not in cnt]

    def alias_table(self) -> dict[str, Expr]:
        """Name-indexed alias lookup table; the first definition of a name wins.

        Built afresh on every call; the game builder keeps its own copy.
        """
        table: dict[str, Expr] = {}
        for alias in self.aliases:
            table.setdefault(alias.name, alias.expr)
        return table

    def lookup_alias(self, name: str) -> Expr:
        table = self.alias_table()
        if name not in table:
            raise MalformedAutomatonError(f"Undefined alias '@{name}'")
        return table[name]


def iter_nodes(expr: Expr):
    """Yield every node of an expression tree, without recursing."""
    stack = [expr]
    while stack:
        node = stack.pop()
        yield node
        if isinstance(node, (And, Or)):
            stack.append(node.right)
            stack.append(node.left)
        elif isinstance(node, (Not, Fin, Inf)):
            stack.append(node.operand)


def expr_to_str(expr: Expr) -> str:
    """Convert an expression tree back to HOA syntax."""
    if isinstance(expr, BoolConst):
        return "t" if expr.value else "f"
    elif isinstance(expr, APRef):
        return str(expr.index)
    elif isinstance(expr, AliasRef):
        return f"@{expr.name}"
    elif isinstance(expr, AccSet):
        return str(expr.index)
    elif isinstance(expr, Not):
        if isinstance(expr.operand, (BoolConst, APRef, AliasRef, AccSet)):
            return f"!{expr_to_str(expr.operand)}"
        return f"!({expr_to_str(expr.operand)})"
    elif isinstance(expr, And):
        return f"({expr_to_str(expr.left)} & {expr_to_str(expr.right)})"
    elif isinstance(expr, Or):
        return f"({expr_to_str(expr.left)} | {expr_to_str(expr.right)})"
    elif isinstance(expr, Fin):
        return f"Fin({expr_to_str(expr.operand)})"
    elif isinstance(expr, Inf):
        return f"Inf({expr_to_str(expr.operand)})"
    raise TypeError(f"Unknown expression node: {expr!r}")
