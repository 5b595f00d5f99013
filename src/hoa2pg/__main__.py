"""Entry point: python -m hoa2pg [input.hoa] [-o game.pg]"""
from __future__ import annotations
import argparse
import logging
import sys
from hoa2pg.game_builder import (
    build_game, GameTooLargeError, MAX_UNCONTROLLABLE_APS,
)
from hoa2pg.hoa_model import MalformedAutomatonError
from hoa2pg.hoa_parser import parse_hoa, HoaParseError
from hoa2pg.pgsolver import write_game
from hoa2pg.validation import ValidationError

log = logging.getLogger("hoa2pg")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="hoa2pg",
        description="Translate a deterministic, complete, colored parity "
                    "automaton (HOA with controllable-AP) into a PGSolver "
                    "parity game.",
    )
    p.add_argument("input", nargs="?", default="-",
                   help="HOA file to read, '-' for stdin (default)")
    p.add_argument("-o", "--output", default="-",
                   help="file to write the game to, '-' for stdout (default)")
    p.add_argument("--exact", action="store_true",
                   help="decide label compatibility with BDDs instead of "
                        "three-valued evaluation")
    p.add_argument("--max-uncontrollable-aps", type=int,
                   default=MAX_UNCONTROLLABLE_APS, metavar="N",
                   help="refuse automata with more than N uncontrollable APs "
                        f"(default {MAX_UNCONTROLLABLE_APS})")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="log debugging information to stderr")
    return p


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r") as f:
        return f.read()


def run(args: argparse.Namespace) -> int:
    try:
        aut = parse_hoa(_read_input(args.input))
        game = build_game(aut,
                          max_uncontrollable_aps=args.max_uncontrollable_aps,
                          exact=args.exact)
    except (HoaParseError, ValidationError, GameTooLargeError) as e:
        log.error("%s", e)
        return e.exit_code
    except MalformedAutomatonError as e:
        log.error("Malformed automaton: %s", e)
        return e.exit_code
    except OSError as e:
        log.error("Cannot read %s: %s", args.input, e.strerror)
        return 1

    # the game is complete at this point, so nothing partial is ever written
    if args.output == "-":
        write_game(game, sys.stdout)
    else:
        with open(args.output, "w") as f:
            write_game(game, f)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
