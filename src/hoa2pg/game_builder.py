"""Unravel a colored parity automaton into a two-player parity game graph.

Every automaton state keeps its index as the controller's decision vertex.
From it the controller moves to one environment vertex per valuation of
the uncontrollable APs; from there the game continues to one vertex per
transition compatible with that valuation, which carries the transition's
priority and leads to the successor state. Fresh vertex indices start at
the number of states and are handed out state by state, valuation by
valuation, so the numbering only depends on the input.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Optional
from hoa2pg.hoa_model import HoaAutomaton, State, MalformedAutomatonError, expr_to_str
from hoa2pg.label_bdd import LabelBdd
from hoa2pg.label_eval import Ternary, evaluate_label
from hoa2pg.priorities import ParityObjective
from hoa2pg.validation import check_automaton

log = logging.getLogger("hoa2pg.game")

MAX_UNCONTROLLABLE_APS = 20

ENVIRONMENT = 0
CONTROLLER = 1


class GameTooLargeError(Exception):
    """The game would need more vertices than we are willing to build."""
    exit_code = 400


@dataclass
class Vertex:
    id: int
    priority: int
    owner: int                     # ENVIRONMENT or CONTROLLER
    successors: list[int]
    label: str


@dataclass
class ParityGame:
    """A max-parity game where even priorities are won by the controller."""
    vertices: list[Vertex] = field(default_factory=list)
    start: Optional[int] = None

    @property
    def max_id(self) -> int:
        return max((v.id for v in self.vertices), default=-1)

    def vertex_map(self) -> dict[int, Vertex]:
        return {v.id: v for v in self.vertices}


class _Builder:
    """Mutable state of one game construction."""

    def __init__(self, aut: HoaAutomaton, objective: ParityObjective,
                 ucnt_aps: list[int], exact: bool):
        self.aut = aut
        self.objective = objective
        self.ucnt_aps = ucnt_aps
        self.num_valuations = 1 << len(ucnt_aps)
        self.aliases = aut.alias_table()
        self.next_index = aut.num_states
        self.vertices: list[Vertex] = []
        self._label_bdd = None
        if exact:
            self._label_bdd = LabelBdd(aut.num_aps, self.aliases)

    def evaluate(self, label, value: int) -> Ternary:
        if self._label_bdd is not None:
            return self._label_bdd.evaluate(label, self.ucnt_aps, value)
        return evaluate_label(label, self.aliases, self.ucnt_aps, value)

    def allocate(self, count: int = 1) -> int:
        first = self.next_index
        self.next_index += count
        return first

    def _priority(self, state: State, trans_idx: int) -> int:
        trans = state.transitions[trans_idx]
        acc = state.effective_acc_sig(trans)
        # there should be exactly one acceptance set
        if acc is None or len(acc) != 1:
            raise MalformedAutomatonError(
                f"State {state.id}, transition {trans_idx}: expected exactly "
                f"one acceptance set, found {0 if acc is None else len(acc)}"
            )
        if not 0 <= acc[0] < self.aut.num_acc_sets:
            raise MalformedAutomatonError(
                f"State {state.id}, transition {trans_idx}: acceptance set "
                f"{acc[0]} is out of range (there are {self.aut.num_acc_sets})"
            )
        return self.objective.normalize(acc[0])

    def _successor(self, state: State, trans_idx: int) -> int:
        succs = state.transitions[trans_idx].successors
        # there should be a single successor per transition
        if len(succs) != 1:
            raise MalformedAutomatonError(
                f"State {state.id}, transition {trans_idx}: expected a single "
                f"successor, found {len(succs)}"
            )
        if not 0 <= succs[0] < self.aut.num_states:
            raise MalformedAutomatonError(
                f"State {state.id}, transition {trans_idx}: successor "
                f"{succs[0]} is not a state"
            )
        return succs[0]

    def add_state(self, state: State):
        if not 0 <= state.id < self.aut.num_states:
            raise MalformedAutomatonError(
                f"State {state.id} is out of range "
                f"(the automaton has {self.aut.num_states} states)"
            )
        first_succ = self.allocate(self.num_valuations)
        for value in range(self.num_valuations):
            compatible: list[int] = []
            for idx, trans in enumerate(state.transitions):
                label = state.effective_label(trans)
                if label is None:
                    raise MalformedAutomatonError(
                        f"State {state.id}, transition {idx} has no label"
                    )
                priority = self._priority(state, idx)
                succ = self._successor(state, idx)
                evald = self.evaluate(label, value)
                log.debug("Label %s for value %d with %d uncontrollable APs: %s",
                          expr_to_str(label), value, len(self.ucnt_aps),
                          evald.name)
                if evald == Ternary.FALSE:
                    continue
                # a single successor, so the owner is irrelevant
                full_val = self.allocate()
                self.vertices.append(
                    Vertex(full_val, priority, ENVIRONMENT, [succ], str(full_val))
                )
                compatible.append(full_val)
            if not compatible:
                raise MalformedAutomatonError(
                    f"State {state.id} has no transition compatible with "
                    f"valuation {value} of the uncontrollable APs; "
                    f"is the automaton really complete?"
                )
            part_val = first_succ + value
            self.vertices.append(
                Vertex(part_val, 0, ENVIRONMENT, compatible, str(part_val))
            )
        self.vertices.append(Vertex(
            state.id, 0, CONTROLLER,
            list(range(first_succ, first_succ + self.num_valuations)),
            state.name if state.name is not None else str(state.id),
        ))


def build_game(aut: HoaAutomaton,
               max_uncontrollable_aps: int = MAX_UNCONTROLLABLE_APS,
               exact: bool = False) -> ParityGame:
    """Build the synthesis parity game of a HOA automaton.

    Args:
        aut: Parsed automaton; it is validated first.
        max_uncontrollable_aps: Refuse automata with more uncontrollable APs
            than this, since each one doubles the size of the game.
        exact: Decide transition compatibility exactly with BDDs instead of
            three-valued evaluation.

    Raises:
        ValidationError: the automaton fails a semantic check.
        GameTooLargeError: too many uncontrollable APs.
        MalformedAutomatonError: the automaton breaks an invariant.
    """
    objective = check_automaton(aut)
    log.info("Building game for %s automaton with %d states", objective,
             aut.num_states)

    ucnt_aps = aut.uncontrollable_aps()
    for ap in ucnt_aps:
        log.debug("Found an uncontrollable AP: %d", ap)
    if len(ucnt_aps) > max_uncontrollable_aps:
        raise GameTooLargeError(
            f"{len(ucnt_aps)} uncontrollable APs would give "
            f"2^{len(ucnt_aps)} valuations per state; the limit is "
            f"{max_uncontrollable_aps} uncontrollable APs"
        )

    # every decision vertex must exist, since edges lead to all of them
    defined = sorted(s.id for s in aut.states)
    if defined != list(range(aut.num_states)):
        missing = sorted(set(range(aut.num_states)) - set(defined))
        raise MalformedAutomatonError(
            f"Expected states 0..{aut.num_states - 1} to be defined"
            + (f", missing {missing}" if missing else "")
        )

    start = aut.start[0]
    if not 0 <= start < aut.num_states:
        raise MalformedAutomatonError(
            f"Start state {start} is not a state "
            f"(the automaton has {aut.num_states} states)"
        )

    builder = _Builder(aut, objective, ucnt_aps, exact)
    try:
        for state in aut.states:
            builder.add_state(state)
    except RecursionError:
        # alias chains are followed recursively
        raise MalformedAutomatonError("Label nesting is too deep") from None

    game = ParityGame(vertices=builder.vertices, start=start)
    log.info("Game has %d vertices", len(game.vertices))
    return game
