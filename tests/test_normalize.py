"""
End-to-end tests of ``idiomizer.normalize`` with the default pass order.

Verifies:
1. Typical generation artifacts are rewritten into their idiomatic form.
2. Normalized output is stable under a second normalization.
3. Normalized trees evaluate like their input.
"""

import pytest

from idiomizer import RuntimeConfig, __version__, normalize
from idiomizer.core import dsl as d
from idiomizer.core import nodes as n
from idiomizer.testing.evaluator import Evaluator


def test_version():
  assert __version__ == "0.1.0"


def test_assigned_block_is_hoisted():
  branch = d.if_(d.var("cond"), d.var("t"), d.var("b"))
  tree = d.block(
    d.bind("a", n.Paren(d.block(d.bind("b", d.call("compute")), branch))),
    d.call("emit", d.var("a")),
  )
  assert normalize(tree) == d.block(d.bind("b", d.call("compute")), d.bind("a", branch), d.call("emit", d.var("a")))


def test_suffixed_parameter_is_renamed():
  tree = d.defn("step", ["g2"], d.binop("+", d.var("g2"), 1))
  assert normalize(tree) == d.defn("step", ["g"], d.binop("+", d.var("g"), 1))


def test_temporary_chain_collapses():
  tree = d.block(d.bind(d.pvar("x", temp=True), d.var("a")), d.bind("y", d.var("x")), d.call("emit", d.var("y")))
  assert normalize(tree) == d.block(d.bind("y", d.var("a")), d.call("emit", d.var("y")))


def test_project_name_argument_qualifies_aliases():
  tree = n.Module("TodoApp.Todos", (d.defn("all", [], d.remote("Repo", "all", d.var("Todo"))),))
  result = normalize(tree, project_name="TodoApp")
  assert result.body[0].body.module == n.ModuleRef("TodoApp.Repo")
  assert normalize(tree) == tree


def test_project_name_argument_overrides_config():
  tree = n.Module("Blog.Posts", (d.defn("all", [], d.remote("Repo", "all", d.var("Post"))),))
  result = normalize(tree, project_name="Blog", config=RuntimeConfig(project_name="TodoApp"))
  assert result.body[0].body.module == n.ModuleRef("Blog.Repo")


def _lowered_doubling():
  body = d.block(
    d.bind("result", d.var("acc")),
    d.bind("result", d.binop("++", d.var("result"), d.lst(d.binop("*", d.var("item"), 2)))),
    d.var("result"),
  )
  return d.defn("double_all", ["items"], d.reduce(d.var("items"), d.lst(), "item", "acc", body))


def test_lowered_loop_is_cleaned_up():
  result = normalize(_lowered_doubling())
  callback = result.body.args[-1]
  assert callback == d.fn(["item", "acc"], d.block(d.binop("++", d.var("acc"), d.lst(d.binop("*", d.var("item"), 2)))))


def _lowered_lookup():
  inner = d.case(
    d.var("value"),
    d.clause(d.plit(0), d.atom("zero")),
    d.clause("other", d.var("other")),
  )
  outer = d.case(
    d.call("fetch", d.var("key")),
    d.clause(d.ptup(d.patom("ok"), "value"), inner),
    d.clause(d.ptup(d.patom("error"), "reason"), d.atom("missing")),
  )
  return d.defn("lookup", ["key", "opts2"], outer)


def test_nested_dispatch_is_flattened_and_hygienic():
  result = normalize(_lowered_lookup())
  assert result.params == (d.pat("key"), d.pat("_opts"))
  assert [c.patterns[0] for c in result.body.clauses] == [
    d.ptup(d.patom("ok"), d.plit(0)),
    d.ptup(d.patom("ok"), "other"),
    d.ptup(d.patom("error"), "_reason"),
  ]


@pytest.mark.parametrize(
  "tree",
  [
    _lowered_doubling(),
    _lowered_lookup(),
    d.defn("step", ["g2"], d.binop("+", d.var("g2"), 1)),
    d.block(d.bind(d.pvar("x", temp=True), d.var("a")), d.bind("y", d.var("x")), d.call("emit", d.var("y"))),
    d.block(d.bind("x", d.var("x")), d.bind("unused", d.call("compute")), d.if_(n.Bool(True), d.var("x"), n.Nil())),
  ],
)
def test_normalization_is_stable(tree):
  once = normalize(tree)
  assert normalize(once) == once


def test_normalized_loop_evaluates_the_same():
  before = Evaluator([_lowered_doubling()])
  after = Evaluator([normalize(_lowered_doubling())])
  for items in [(), (1,), (1, 2, 3)]:
    assert after.call("double_all", items) == before.call("double_all", items)
