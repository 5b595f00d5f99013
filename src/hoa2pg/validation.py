"""Semantic checks an automaton must pass before a game is built from it."""
from __future__ import annotations
from hoa2pg.hoa_model import HoaAutomaton
from hoa2pg.priorities import ParityObjective, EVEN, ODD

WRONG_ACC_NAME = 100
MISSING_MAX_MIN = 101
MISSING_EVEN_ODD = 102
NOT_DETERMINISTIC = 200
NOT_COMPLETE = 201
NOT_COLORED = 202
START_NOT_UNIQUE = 300


class ValidationError(Exception):
    """The automaton is well formed but not of the kind a game can be built from."""

    def __init__(self, exit_code: int, message: str):
        super().__init__(message)
        self.exit_code = exit_code
        self.message = message


def _pick_one(params: tuple[str, ...], options: dict[str, object],
              exit_code: int):
    found = [p for p in params if p in options]
    expected = " or ".join(f'"{o}"' for o in options)
    if not found:
        raise ValidationError(
            exit_code, f"Expected {expected} in the acceptance name"
        )
    if len(set(found)) > 1:
        raise ValidationError(
            exit_code, f"Expected only one of {expected} in the acceptance "
                       f"name, found {', '.join(found)}"
        )
    return options[found[0]]


def check_automaton(aut: HoaAutomaton) -> ParityObjective:
    """Check that aut is a deterministic, complete, colored parity automaton
    with a unique start state.

    Returns:
        The parity objective named in the acc-name header.

    Raises:
        ValidationError: for the first check that fails, with the exit code
            matching that check.
    """
    # (1) the automaton should be a parity one
    if aut.acc_name != "parity":
        raise ValidationError(
            WRONG_ACC_NAME,
            f'Expected "parity..." automaton, found "{aut.acc_name}" '
            f"as automaton type",
        )
    max_priority = _pick_one(aut.acc_name_params, {"max": True, "min": False},
                             MISSING_MAX_MIN)
    winning_parity = _pick_one(aut.acc_name_params, {"even": EVEN, "odd": ODD},
                               MISSING_EVEN_ODD)

    # (2) deterministic, complete, colored
    props = set(aut.properties)
    if "deterministic" not in props:
        raise ValidationError(
            NOT_DETERMINISTIC,
            'Expected a deterministic automaton, did not find '
            '"deterministic" in the properties',
        )
    if "complete" not in props:
        raise ValidationError(
            NOT_COMPLETE,
            'Expected a complete automaton, did not find "complete" '
            'in the properties',
        )
    if "colored" not in props:
        raise ValidationError(
            NOT_COLORED,
            'Expected one acceptance set per transition, did not find '
            '"colored" in the properties',
        )

    # (3) unique start state
    if len(aut.start) != 1:
        raise ValidationError(
            START_NOT_UNIQUE,
            f"Expected a unique start state, found {len(aut.start)}",
        )

    return ParityObjective(max_priority, winning_parity, aut.num_acc_sets)
