"""Tests for HOA parser correctness."""
import pytest
from hoa2pg.hoa_model import (
    BoolConst, And, Or, Not, Fin, Inf, AccSet, APRef, AliasRef, iter_nodes,
)
from hoa2pg.hoa_parser import parse_hoa, HoaParseError


def _hoa(header: str = "", body: str = "State: 0\n[t] 0 {0}\n") -> str:
    return (
        "HOA: v1\nStates: 1\nStart: 0\nAP: 1 \"a\"\n"
        "acc-name: parity max even 1\nAcceptance: 1 Inf(0)\n"
        "properties: deterministic complete colored\n"
        f"{header}--BODY--\n{body}--END--\n"
    )


class TestArbiterHeader:
    def test_version(self, arbiter_aut):
        assert arbiter_aut.version == "v1"

    def test_name_and_tool(self, arbiter_aut):
        assert arbiter_aut.name == "G(r -> F g)"
        assert arbiter_aut.tool_name == "handmade"
        assert arbiter_aut.tool_version == "1.0"

    def test_state_count(self, arbiter_aut):
        assert arbiter_aut.num_states == 2

    def test_start(self, arbiter_aut):
        assert arbiter_aut.start == (0,)

    def test_aps(self, arbiter_aut):
        assert arbiter_aut.aps == ("r", "g")
        assert arbiter_aut.num_aps == 2

    def test_controllable(self, arbiter_aut):
        assert arbiter_aut.controllable_aps == (1,)
        assert arbiter_aut.uncontrollable_aps() == [0]

    def test_acc_name(self, arbiter_aut):
        assert arbiter_aut.acc_name == "parity"
        assert arbiter_aut.acc_name_params == ("max", "even", "3")

    def test_acceptance(self, arbiter_aut):
        assert arbiter_aut.num_acc_sets == 3
        assert arbiter_aut.acceptance == Or(
            Inf(AccSet(2)), And(Fin(AccSet(1)), Inf(AccSet(0)))
        )

    def test_properties_accumulate_in_order(self, arbiter_aut):
        assert arbiter_aut.properties == (
            "trans-labels", "explicit-labels", "trans-acc",
            "deterministic", "complete", "colored",
        )


class TestArbiterBody:
    def test_states_in_input_order(self, arbiter_aut):
        assert [s.id for s in arbiter_aut.states] == [0, 1]
        assert [s.name for s in arbiter_aut.states] == ["idle", "pending"]

    def test_transitions_in_input_order(self, arbiter_aut):
        idle = arbiter_aut.states[0]
        assert [t.successors for t in idle.transitions] == [(0,), (1,)]

    def test_label_tree(self, arbiter_aut):
        idle = arbiter_aut.states[0]
        assert idle.transitions[0].label == Or(Not(APRef(0)), APRef(1))
        assert idle.transitions[1].label == And(APRef(0), Not(APRef(1)))

    def test_transition_acc_sig(self, arbiter_aut):
        pending = arbiter_aut.states[1]
        assert [t.acc_sig for t in pending.transitions] == [(2,), (1,)]

    def test_no_state_level_items(self, arbiter_aut):
        for state in arbiter_aut.states:
            assert state.label is None
            assert state.acc_sig is None


class TestAliases:
    def test_alias_order(self, aliases_aut):
        assert [a.name for a in aliases_aut.aliases] == ["a", "b", "both"]

    def test_alias_body(self, aliases_aut):
        assert aliases_aut.lookup_alias("both") == And(AliasRef("a"), AliasRef("b"))

    def test_state_acc_sig(self, aliases_aut):
        assert [s.acc_sig for s in aliases_aut.states] == [(1,), (2,)]
        assert all(t.acc_sig is None for s in aliases_aut.states
                   for t in s.transitions)

    def test_alias_labels(self, aliases_aut):
        s0 = aliases_aut.states[0]
        assert s0.transitions[0].label == AliasRef("both")
        assert s0.transitions[1].label == Not(AliasRef("both"))

    def test_misc_header_ignored(self, aliases_aut):
        assert aliases_aut.acc_name == "parity"
        assert aliases_aut.acc_name_params == ("min", "odd", "3")


class TestExpressions:
    def test_precedence(self):
        aut = parse_hoa(_hoa(body="State: 0\n[0 | !0 & t] 0 {0}\n"))
        assert aut.states[0].transitions[0].label == Or(
            APRef(0), And(Not(APRef(0)), BoolConst(True))
        )

    def test_parentheses(self):
        aut = parse_hoa(_hoa(body="State: 0\n[!(0 | f)] 0 {0}\n"))
        assert aut.states[0].transitions[0].label == Not(
            Or(APRef(0), BoolConst(False))
        )

    def test_negated_acceptance_set(self):
        text = _hoa().replace("Acceptance: 1 Inf(0)", "Acceptance: 1 Fin(!0)")
        assert parse_hoa(text).acceptance == Fin(Not(AccSet(0)))

    def test_comments_ignored(self):
        aut = parse_hoa(_hoa(body="State: 0 /* only */\n[t] 0 {0} /* loop */\n"))
        assert len(aut.states[0].transitions) == 1


class TestOptionalItems:
    def test_state_label(self):
        aut = parse_hoa(_hoa(body="State: [0] 0 \"s\" {0}\n0\n"))
        state = aut.states[0]
        assert state.label == APRef(0)
        assert state.name == "s"
        assert state.acc_sig == (0,)
        assert state.transitions[0].label is None

    def test_empty_acc_sig(self):
        aut = parse_hoa(_hoa(body="State: 0\n[t] 0 {}\n"))
        assert aut.states[0].transitions[0].acc_sig == ()

    def test_successor_conjunction(self):
        aut = parse_hoa(_hoa(body="State: 0\n[t] 0&0 {0}\n"))
        assert aut.states[0].transitions[0].successors == (0, 0)

    def test_several_start_lines(self):
        aut = parse_hoa(_hoa(header="Start: 0\n"))
        assert aut.start == (0, 0)

    def test_states_inferred(self):
        text = _hoa().replace("States: 1\n", "")
        assert parse_hoa(text).num_states == 1

    def test_no_controllable_aps(self, single_state_aut):
        assert single_state_aut.controllable_aps == ()
        assert single_state_aut.uncontrollable_aps() == [0]


class TestErrors:
    def test_syntax_error(self):
        with pytest.raises(HoaParseError):
            parse_hoa("HOA: v1\nStates: two\n--BODY--\n--END--\n")

    def test_missing_end(self):
        with pytest.raises(HoaParseError):
            parse_hoa(_hoa().replace("--END--\n", ""))

    def test_ap_count_mismatch(self):
        text = _hoa().replace('AP: 1 "a"', 'AP: 2 "a"')
        with pytest.raises(HoaParseError, match="declares 2"):
            parse_hoa(text)

    def test_controllable_out_of_range(self):
        with pytest.raises(HoaParseError, match="out of range"):
            parse_hoa(_hoa(header="controllable-AP: 3\n"))

    def test_duplicate_state(self):
        with pytest.raises(HoaParseError, match="defined twice"):
            parse_hoa(_hoa(body="State: 0\n[t] 0 {0}\nState: 0\n[t] 0 {0}\n"))

    def test_exit_code(self):
        assert HoaParseError.exit_code == 1

    def test_label_ap_out_of_range(self):
        with pytest.raises(HoaParseError, match="transition 0: AP 7 is out of range"):
            parse_hoa(_hoa(body="State: 0\n[t | 7] 0 {0}\n"))

    def test_state_label_ap_out_of_range(self):
        with pytest.raises(HoaParseError, match="State 0: AP 1 is out of range"):
            parse_hoa(_hoa(body="State: [1] 0 {0}\n0\n"))

    def test_alias_ap_out_of_range(self):
        with pytest.raises(HoaParseError, match="Alias '@x': AP 2"):
            parse_hoa(_hoa(header="Alias: @x 0 & !2\n"))

    def test_deep_negation(self):
        text = _hoa(body="State: 0\n[" + "!" * 5000 + "t] 0 {0}\n")
        with pytest.raises(HoaParseError, match="too deep"):
            parse_hoa(text)


class TestLongChains:
    def test_three_operands_group_left(self):
        aut = parse_hoa(_hoa(body="State: 0\n[0 & !0 & t] 0 {0}\n"))
        assert aut.states[0].transitions[0].label == And(
            And(APRef(0), Not(APRef(0))), BoolConst(True)
        )

    def test_thousand_conjuncts(self):
        label = " & ".join(["(t | 0)"] * 1000)
        aut = parse_hoa(_hoa(body=f"State: 0\n[{label}] 0 {{0}}\n"))
        tree = aut.states[0].transitions[0].label
        conjuncts = [n for n in iter_nodes(tree) if isinstance(n, Or)]
        assert len(conjuncts) == 1000
        assert _depth(tree) <= 12

    def test_long_acceptance_chain(self):
        acc = " | ".join(f"Inf({i})" for i in range(600))
        text = _hoa().replace("Acceptance: 1 Inf(0)", f"Acceptance: 600 {acc}")
        aut = parse_hoa(text)
        assert sum(isinstance(n, Inf) for n in iter_nodes(aut.acceptance)) == 600


def _depth(expr) -> int:
    if isinstance(expr, (And, Or)):
        return 1 + max(_depth(expr.left), _depth(expr.right))
    if isinstance(expr, Not):
        return 1 + _depth(expr.operand)
    return 1
