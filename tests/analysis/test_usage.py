"""
Tests for the Scope/Usage Analyzer.

Verifies:
1. Binders are never reads; right-hand sides, branches, guards and nested
   bodies are scanned.
2. Pins and expressions embedded in patterns are reads.
3. Opaque fragments are scanned with token boundaries; templates using
   ``@field`` read ``assigns``.
4. ``UsageIndex`` agrees with the direct walk on generated statement lists.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from idiomizer.analysis.usage import (
  READ_ROLES,
  UsageIndex,
  any_referenced,
  collect_bound_names,
  collect_names,
  collect_possible_binders,
  collect_reads,
  is_referenced,
  leaking_binders,
  pattern_binders,
  references,
)
from idiomizer.core import dsl as d
from idiomizer.core import nodes as n
from idiomizer.core import patterns as p
from idiomizer.testing.strategies import NAMES, statement_lists


def test_every_shape_has_a_read_role():
  assert set(READ_ROLES) == set(n.NODE_TYPES) | set(p.PATTERN_TYPES)


def test_binder_is_not_a_read():
  assert not is_referenced([d.bind("x", 1)], 0, "x")
  assert not is_referenced([d.bind(d.ptup("x", "y"), d.var("z"))], 0, "x")


def test_right_hand_side_is_a_read():
  assert is_referenced([d.bind("y", d.binop("+", d.var("x"), 1))], 0, "x")


def test_from_index_skips_earlier_statements():
  stmts = [d.call("f", d.var("x")), d.bind("y", 1)]
  assert is_referenced(stmts, 0, "x")
  assert not is_referenced(stmts, 1, "x")
  assert is_referenced(stmts, -3, "x")
  assert not is_referenced(stmts, 5, "x")


def test_nested_constructs_are_scanned():
  branch = d.if_(d.var("c"), d.block(d.bind("t", 1), d.var("hidden")), 2)
  dispatch = d.case(d.var("s"), d.clause("v", d.var("inner"), guard=d.binop(">", d.var("g"), 0)))
  closure = d.fn(["a"], d.var("captured"))
  comprehension = n.For((n.Generator(p.PVar("e"), d.var("items")),), d.var("body_read"))

  for name, tree in [
    ("hidden", branch),
    ("inner", dispatch),
    ("g", dispatch),
    ("captured", closure),
    ("body_read", comprehension),
    ("items", comprehension),
  ]:
    assert is_referenced([tree], 0, name), name


def test_pin_is_a_read():
  assert is_referenced([d.bind(p.PPin("x"), 1)], 0, "x")


def test_embedded_pattern_expressions_are_reads():
  stmt = n.Match(p.PMap(((d.var("key"), p.PVar("v")),)), d.var("m"))
  assert is_referenced([stmt], 0, "key")
  assert not is_referenced([stmt], 0, "v")


def test_opaque_fragments_use_token_boundaries():
  assert is_referenced([d.raw("IO.puts(acc)")], 0, "acc")
  assert not is_referenced([d.raw("acc_total")], 0, "acc")


def test_template_assigns_access():
  template = n.Template("<p><%= @title %></p>")
  assert references(template, "assigns")
  assert not references(n.Template("<p>static</p>"), "assigns")
  assert UsageIndex([template]).is_referenced(0, "assigns")


def test_collectors():
  stmt = d.bind(d.ptup("a", p.PPin("b")), d.call("f", d.var("c"), d.raw("d + 1")))
  assert collect_reads(stmt) == {"b", "c", "d", "1"}
  assert collect_bound_names(stmt) == {"a"}
  assert collect_names(stmt) == {"a", "b", "c", "d", "1"}
  assert collect_possible_binders(stmt) == {"a", "d", "1"}


def test_pattern_binders_in_order():
  pattern = d.ptup("a", p.PAlias(d.ptup("b", p.PPin("c")), "d"), "a")
  assert pattern_binders(pattern) == ["a", "d", "b", "a"]


def test_leaking_binders():
  assert leaking_binders(d.bind("x", 1)) == {"x"}
  assert leaking_binders(d.if_(d.bind("c", 1), d.bind("t", 2), None)) == {"c"}
  assert leaking_binders(n.Paren(d.block(d.bind("a", 1), d.bind("b", 2)))) == {"a", "b"}
  assert leaking_binders(d.fn(["x"], d.bind("y", 1))) == set()
  assert leaking_binders(d.case(d.bind("s", 1), d.clause("v", d.bind("w", 2)))) == {"s"}
  assert leaking_binders(d.raw("z = 1")) == {"z", "1"}


def test_any_referenced_ignores_none():
  assert not any_referenced([None, d.var("y")], "x")
  assert any_referenced([None, d.var("x")], "x")


def test_usage_index_queries():
  stmts = [d.bind("x", 1), d.call("f", d.var("x")), d.raw("IO.inspect(y)")]
  index = UsageIndex(stmts)

  assert len(index) == 3
  assert index.is_referenced(0, "x")
  assert not index.is_referenced(2, "x")
  assert index.is_referenced(2, "y")


@given(
  stmts=statement_lists,
  name=st.sampled_from(NAMES + ("assigns", "acc_total", "x + 1", "")),
  start=st.integers(min_value=-1, max_value=7),
)
@settings(max_examples=200, deadline=None)
def test_index_agrees_with_walk(stmts, name, start):
  assert UsageIndex(stmts).is_referenced(start, name) == is_referenced(stmts, start, name)
