"""HOA file parser using Lark. Parses HOA v1 with the controllable-AP extension."""
from __future__ import annotations
import logging
import os
from lark import Lark, Transformer
from lark.exceptions import LarkError, VisitError
from hoa2pg.hoa_model import (
    HoaAutomaton, Alias, State, Transition,
    BoolConst, And, Or, Not, Fin, Inf, AccSet, APRef, AliasRef, iter_nodes,
)

log = logging.getLogger("hoa2pg.parser")

_GRAMMAR_PATH = os.path.join(os.path.dirname(__file__), "hoa_grammar.lark")

_parser = None

def _get_parser():
    global _parser
    if _parser is None:
        with open(_GRAMMAR_PATH, "r") as f:
            grammar_text = f.read()
        _parser = Lark(grammar_text, parser="lalr", maybe_placeholders=True)
    return _parser


class HoaParseError(Exception):
    """Raised when the input is not a well-formed HOA automaton."""
    exit_code = 1


def _fold(op, operands):
    """Join a flat operator chain into a balanced tree of binary nodes.

    Keeps long chains such as a & b & ... & z logarithmically deep; the
    first split point leaves three operands grouped as ((a op b) op c).
    """
    if len(operands) == 1:
        return operands[0]
    mid = (len(operands) + 1) // 2
    return op(_fold(op, operands[:mid]), _fold(op, operands[mid:]))


class HoaTransformer(Transformer):
    """Transforms the Lark parse tree into HoaAutomaton dataclasses."""

    # ---- Terminals ----
    def INT(self, token):
        return int(token)

    def STRING(self, token):
        # Escape sequences are kept verbatim so the text can be re-quoted as is
        return str(token)[1:-1]

    def IDENTIFIER(self, token):
        return str(token)

    def ANAME(self, token):
        return str(token)[1:]

    # ---- Label expressions ----
    def true_const(self, args):
        return BoolConst(True)

    def false_const(self, args):
        return BoolConst(False)

    def ap_ref(self, args):
        return APRef(args[0])

    def alias_ref(self, args):
        return AliasRef(args[0])

    def not_expr(self, args):
        return Not(args[0])

    def and_expr(self, args):
        return _fold(And, args)

    def or_expr(self, args):
        return _fold(Or, args)

    # ---- Acceptance conditions ----
    def set_ref(self, args):
        return AccSet(args[0])

    def neg_set_ref(self, args):
        return Not(AccSet(args[0]))

    def fin_cond(self, args):
        return Fin(args[0])

    def inf_cond(self, args):
        return Inf(args[0])

    def acc_and_op(self, args):
        return _fold(And, args)

    def acc_or(self, args):
        return _fold(Or, args)

    # ---- Header items ----
    def format_version(self, args):
        return ("HOA", args[0])

    def states_decl(self, args):
        return ("States", args[0])

    def start_decl(self, args):
        return ("Start", args[0])

    def state_conj(self, args):
        return tuple(args)

    def ap_decl(self, args):
        return ("AP", (args[0], tuple(args[1:])))

    def cnt_ap_decl(self, args):
        return ("controllable-AP", tuple(args))

    def alias_decl(self, args):
        return ("Alias", Alias(args[0], args[1]))

    def acceptance_decl(self, args):
        return ("Acceptance", (args[0], args[1]))

    def acc_name_decl(self, args):
        return ("acc-name", (args[0], tuple(str(p) for p in args[1:])))

    def tool_decl(self, args):
        return ("tool", (args[0], args[1]))

    def name_decl(self, args):
        return ("name", args[0])

    def properties_decl(self, args):
        return ("properties", tuple(str(p) for p in args))

    def misc_decl(self, args):
        return ("misc", str(args[0])[:-1])

    def header(self, args):
        return list(args)

    # ---- Body ----
    def label(self, args):
        return args[0]

    def acc_sig(self, args):
        return tuple(args)

    def edge(self, args):
        label, successors, acc_sig = args
        return Transition(successors=successors, label=label, acc_sig=acc_sig)

    def state_name(self, args):
        return tuple(args)

    def state(self, args):
        label, state_id, name, acc_sig = args[0]
        return State(
            id=state_id, name=name, label=label, acc_sig=acc_sig,
            transitions=tuple(args[1:]),
        )

    def body(self, args):
        return tuple(args)

    # ---- Top-level ----
    def start(self, args):
        header, states = args
        fields: dict = {"states": states}
        start: list[int] = []
        aliases: list[Alias] = []
        properties: list[str] = []
        for key, value in header:
            if key == "HOA":
                fields["version"] = value
            elif key == "States":
                fields["num_states"] = value
            elif key == "Start":
                start.extend(value)
            elif key == "AP":
                count, names = value
                if count != len(names):
                    raise HoaParseError(
                        f"AP header declares {count} propositions "
                        f"but names {len(names)}"
                    )
                fields["aps"] = names
            elif key == "controllable-AP":
                fields["controllable_aps"] = value
            elif key == "Alias":
                aliases.append(value)
            elif key == "Acceptance":
                fields["num_acc_sets"], fields["acceptance"] = value
            elif key == "acc-name":
                fields["acc_name"], fields["acc_name_params"] = value
            elif key == "tool":
                fields["tool_name"], fields["tool_version"] = value
            elif key == "name":
                fields["name"] = value
            elif key == "properties":
                properties.extend(value)
            else:
                log.debug("Ignoring header '%s:'", value)
        fields["start"] = tuple(start)
        fields["aliases"] = tuple(aliases)
        fields["properties"] = tuple(properties)
        if "num_states" not in fields:
            fields["num_states"] = max((s.id for s in states), default=-1) + 1
        return HoaAutomaton(**fields)


_transformer = HoaTransformer()


def _check_header(aut: HoaAutomaton):
    """Cross-check header items that refer to each other."""
    for ap in aut.controllable_aps:
        if not 0 <= ap < aut.num_aps:
            raise HoaParseError(
                f"Controllable AP {ap} is out of range (AP count is {aut.num_aps})"
            )
    seen = set()
    for state in aut.states:
        if state.id in seen:
            raise HoaParseError(f"State {state.id} is defined twice")
        seen.add(state.id)
    labels = [(f"Alias '@{alias.name}'", alias.expr) for alias in aut.aliases]
    for state in aut.states:
        labels.append((f"State {state.id}", state.label))
        labels.extend((f"State {state.id}, transition {idx}", trans.label)
                      for idx, trans in enumerate(state.transitions))
    for where, label in labels:
        if label is None:
            continue
        for node in iter_nodes(label):
            if isinstance(node, APRef) and not 0 <= node.index < aut.num_aps:
                raise HoaParseError(
                    f"{where}: AP {node.index} is out of range "
                    f"(AP count is {aut.num_aps})"
                )


def parse_hoa(text: str) -> HoaAutomaton:
    """Parse a HOA automaton string and return a HoaAutomaton."""
    parser = _get_parser()
    try:
        tree = parser.parse(text)
        aut = _transformer.transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, HoaParseError):
            raise e.orig_exc from None
        if isinstance(e.orig_exc, RecursionError):
            raise HoaParseError("Expression nesting is too deep") from None
        raise
    except RecursionError:
        raise HoaParseError("Expression nesting is too deep") from None
    except LarkError as e:
        raise HoaParseError(str(e)) from e
    _check_header(aut)
    log.debug("Parsed automaton with %d states and %d APs",
              aut.num_states, aut.num_aps)
    return aut


def parse_hoa_file(filepath: str) -> HoaAutomaton:
    """Parse a HOA file and return a HoaAutomaton."""
    with open(filepath, "r") as f:
        text = f.read()
    return parse_hoa(text)
