"""PGSolver text output for parity games."""
from __future__ import annotations
from typing import TextIO
from hoa2pg.game_builder import ParityGame, Vertex


def format_vertex(v: Vertex) -> str:
    succs = ",".join(str(s) for s in v.successors)
    return f'{v.id} {v.priority} {v.owner} {succs} "{v.label}"'


def format_game(game: ParityGame) -> str:
    """Render a game as 'parity <max id>;' followed by one line per vertex."""
    lines = [f"parity {game.max_id};"]
    lines.extend(format_vertex(v) for v in game.vertices)
    return "\n".join(lines) + "\n"


def write_game(game: ParityGame, out: TextIO):
    """Write the whole game to out in a single call."""
    out.write(format_game(game))
