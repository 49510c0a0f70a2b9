"""
Tests for Nested Dispatch Flattening.

Verifies:
1. An outer clause re-dispatching on its payload is replaced by one clause
   per inner clause (M outer and K inner clauses give M - 1 + K).
2. References to the eliminated binder are renamed or kept through an alias.
3. Flattening is skipped when a value could fall through differently.
4. The flattened dispatch evaluates like the nested one.
"""

import pytest

from idiomizer.core import dsl as d
from idiomizer.core import patterns as p
from idiomizer.core.rewriter.passes import NestedCaseFlatteningPass
from idiomizer.testing.evaluator import OK, atom, evaluate, tup


def _ok(pattern):
  return d.ptup(d.patom("ok"), pattern)


def _error(pattern):
  return d.ptup(d.patom("error"), pattern)


def test_user_lookup_dispatch_is_flattened(run_pass):
  user = p.PAlias(p.PStruct("User"), "user")
  tree = d.case(
    d.var("result"),
    d.clause(
      _ok("value"),
      d.case(d.var("value"), d.clause(user, d.var("user")), d.clause("other", d.var("other"))),
    ),
    d.clause(_error("reason"), d.var("reason")),
  )
  result = run_pass(NestedCaseFlatteningPass, tree)

  assert result == d.case(
    d.var("result"),
    d.clause(_ok(user), d.var("user")),
    d.clause(_ok("other"), d.var("other")),
    d.clause(_error("reason"), d.var("reason")),
  )
  assert len(result.clauses) == (2 - 1) + 2
  assert run_pass.context.rewrite_counts["nested_case_flattening"] == 1


def _integer_dispatch():
  inner = d.case(
    d.var("v"),
    d.clause(d.plit(0), d.atom("zero")),
    d.clause("x", d.binop("+", d.var("v"), 1), guard=d.call("is_integer", d.var("x"))),
    d.clause("_", d.var("v")),
  )
  return d.case(d.var("r"), d.clause(_ok("v"), inner), d.clause(_error("e"), d.var("e")))


def test_outer_binder_reads_are_renamed_or_restored(run_pass):
  result = run_pass(NestedCaseFlatteningPass, _integer_dispatch())
  assert result.clauses == (
    d.clause(_ok(d.plit(0)), d.atom("zero")),
    d.clause(_ok("x"), d.binop("+", d.var("x"), 1), guard=d.call("is_integer", d.var("x"))),
    d.clause(_ok("v"), d.var("v")),
    d.clause(_error("e"), d.var("e")),
  )


@pytest.mark.parametrize("subject", [tup(OK, 0), tup(OK, 41), tup(OK, "s"), tup(atom("error"), atom("boom"))])
def test_flattened_dispatch_evaluates_the_same(run_pass, subject):
  tree = _integer_dispatch()
  result = run_pass(NestedCaseFlatteningPass, tree)
  assert evaluate(result, {"r": subject}) == evaluate(tree, {"r": subject})


def test_structured_inner_pattern_keeps_outer_name_through_alias(run_pass):
  tree = d.case(
    d.var("r"),
    d.clause(_ok("v"), d.case(d.var("v"), d.clause(d.ptup("a", "b"), d.tup(d.var("v"), d.var("a"))), d.clause("_", 0))),
  )
  result = run_pass(NestedCaseFlatteningPass, tree)
  assert result.clauses[0].patterns[0] == _ok(p.PAlias(d.ptup("a", "b"), "v"))
  assert evaluate(result, {"r": tup(OK, tup(1, 2))}) == tup(tup(1, 2), 1)


def test_non_exhaustive_inner_flattens_when_no_later_clause_shares_the_tag(run_pass):
  tree = d.case(
    d.var("r"),
    d.clause(_ok("v"), d.case(d.var("v"), d.clause(d.plit(0), d.atom("zero")))),
    d.clause(_error("e"), d.var("e")),
  )
  result = run_pass(NestedCaseFlatteningPass, tree)
  assert result.clauses == (d.clause(_ok(d.plit(0)), d.atom("zero")), d.clause(_error("e"), d.var("e")))


def test_fall_through_to_same_tag_blocks_flattening(run_pass):
  tree = d.case(
    d.var("r"),
    d.clause(_ok("v"), d.case(d.var("v"), d.clause(d.plit(0), d.atom("zero")))),
    d.clause(_ok("_"), d.atom("other")),
  )
  assert run_pass(NestedCaseFlatteningPass, tree) is tree


def test_later_catch_all_blocks_non_exhaustive_flattening(run_pass):
  tree = d.case(
    d.var("r"),
    d.clause(_ok("v"), d.case(d.var("v"), d.clause(d.plit(0), d.atom("zero")))),
    d.clause("other", d.atom("other")),
  )
  assert run_pass(NestedCaseFlatteningPass, tree) is tree


@pytest.mark.parametrize(
  "outer",
  [
    d.clause(_ok("v"), d.case(d.var("v"), d.clause(p.PPin("v"), 1), d.clause("_", 2))),
    d.clause(_ok("v"), d.case(d.var("other"), d.clause("_", 1))),
    d.clause(_ok("v"), d.block(d.call("log"), d.case(d.var("v"), d.clause("_", 1)))),
    d.clause(_ok("v"), d.case(d.var("v"), d.clause("_", 1)), guard=d.var("ready")),
    d.clause(d.ptup(d.patom("ok"), "v", "w"), d.case(d.var("v"), d.clause("_", 1))),
  ],
)
def test_ineligible_shapes_are_left_alone(run_pass, outer):
  tree = d.case(d.var("r"), outer)
  assert run_pass(NestedCaseFlatteningPass, tree) is tree


def test_rebinding_in_inner_body_blocks_rename(run_pass):
  inner = d.case(d.var("v"), d.clause("x", d.block(d.bind("v", 2), d.var("v"))))
  tree = d.case(d.var("r"), d.clause(_ok("v"), inner))
  assert run_pass(NestedCaseFlatteningPass, tree) is tree


def test_outer_name_used_as_atom_blocks_rename(run_pass):
  inner = d.case(d.var("v"), d.clause("x", d.raw("Map.get(v, :v)")))
  tree = d.case(d.var("r"), d.clause(_ok("v"), inner))
  assert run_pass(NestedCaseFlatteningPass, tree) is tree


def test_flattening_repeats_until_no_nesting_remains(run_pass):
  innermost = d.case(d.var("w"), d.clause(d.plit(1), d.atom("one")), d.clause("_", d.atom("many")))
  middle = d.case(d.var("v"), d.clause(_ok("w"), innermost), d.clause("_", d.atom("bad")))
  tree = d.case(d.var("r"), d.clause(_ok("v"), middle))
  once = run_pass(NestedCaseFlatteningPass, tree)
  assert run_pass(NestedCaseFlatteningPass, once) == once
  for subject in (tup(OK, tup(OK, 1)), tup(OK, tup(OK, 2)), tup(OK, 3)):
    assert evaluate(once, {"r": subject}) == evaluate(tree, {"r": subject})
