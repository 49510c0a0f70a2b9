"""
Tests for the tree construction helpers.
"""

import pytest

from idiomizer.core import dsl as d
from idiomizer.core import nodes as n
from idiomizer.core import patterns as p


def test_lit_coercion():
  assert d.lit(None) == n.Nil()
  assert d.lit(True) == n.Bool(True)
  assert d.lit(3) == n.Int(3)
  assert d.lit(1.5) == n.Float(1.5)
  assert d.lit("s") == n.Str("s")
  assert d.lit(n.Var("x")) == n.Var("x")
  with pytest.raises(TypeError):
    d.lit(object())


def test_pattern_coercion():
  assert d.pat("x") == p.PVar("x")
  assert d.pat("_") == p.PWildcard()
  assert d.ptup("a", "_") == p.PTuple((p.PVar("a"), p.PWildcard()))


def test_pvar_metadata():
  assert d.pvar("x").meta.is_empty
  tagged = d.pvar("tmp", temp=True, loop_origin="item")
  assert tagged.meta.is_compiler_temp is True
  assert tagged.meta.loop_origin_name == "item"


def test_clause_accepts_bare_pattern():
  assert d.clause("x", 1).patterns == (p.PVar("x"),)
  assert d.clause(["x", "y"], 1, guard=d.var("x")).guard == n.Var("x")


def test_reduce_shape():
  tree = d.reduce(d.var("xs"), 0, "x", "acc", d.binop("+", d.var("acc"), d.var("x")))
  assert isinstance(tree, n.RemoteCall)
  assert tree.module == n.ModuleRef("Enum")
  assert tree.function == "reduce"
  assert tree.args[-1].clauses[0].patterns == (p.PVar("x"), p.PVar("acc"))
