"""Translate colored parity automata in HOA format into PGSolver parity games."""

__version__ = "0.1.0"
