"""Shared fixtures for hoa2pg tests."""
from __future__ import annotations
import os
import sys
import pytest

# Ensure src/ is on the path so hoa2pg is importable without install
_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
_SRC = os.path.join(_ROOT, "src")
if _SRC not in sys.path:
    sys.path.insert(0, _SRC)

from hoa2pg.hoa_parser import parse_hoa_file
from hoa2pg.game_builder import build_game

EXAMPLES_DIR = os.path.join(_ROOT, "examples")


def example_path(name: str) -> str:
    return os.path.join(EXAMPLES_DIR, name)


# --------------- Parsed automata ---------------

@pytest.fixture(scope="session")
def single_state_aut():
    return parse_hoa_file(example_path("single_state.hoa"))


@pytest.fixture(scope="session")
def arbiter_aut():
    return parse_hoa_file(example_path("arbiter.hoa"))


@pytest.fixture(scope="session")
def aliases_aut():
    return parse_hoa_file(example_path("aliases_min_odd.hoa"))


@pytest.fixture(scope="session")
def two_inputs_aut():
    return parse_hoa_file(example_path("two_inputs.hoa"))


# --------------- Games ---------------

@pytest.fixture(scope="session")
def single_state_game(single_state_aut):
    return build_game(single_state_aut)


@pytest.fixture(scope="session")
def arbiter_game(arbiter_aut):
    return build_game(arbiter_aut)


@pytest.fixture(scope="session")
def aliases_game(aliases_aut):
    return build_game(aliases_aut)


@pytest.fixture(scope="session")
def two_inputs_game(two_inputs_aut):
    return build_game(two_inputs_aut)
