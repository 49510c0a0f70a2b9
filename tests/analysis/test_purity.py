"""
Tests for Static Purity Analysis.

Verifies:
1. Arithmetic, data construction and known-pure library calls are pure.
2. Unknown calls, I/O, opaque fragments and raises are impure.
3. Function literals are pure to create but inspected when passed to calls.
"""

import pytest

from idiomizer.analysis.purity import is_pure
from idiomizer.core import dsl as d
from idiomizer.core import nodes as n


@pytest.mark.parametrize(
  "tree",
  [
    d.binop("+", d.var("a"), 1),
    d.tup(d.atom("ok"), d.lst(1, 2)),
    d.call("length", d.var("xs")),
    d.remote("Enum", "map", d.var("xs"), d.fn(["x"], d.binop("*", d.var("x"), 2))),
    d.remote("String", "upcase", d.var("s")),
    n.Pipe(d.var("xs"), d.remote("Enum", "sum")),
    d.fn(["x"], d.call("compute", d.var("x"))),
    d.if_(d.var("c"), 1, 2),
  ],
)
def test_pure(tree):
  assert is_pure(tree)


@pytest.mark.parametrize(
  "tree",
  [
    d.call("compute"),
    d.remote("IO", "puts", "hi"),
    d.remote("Enum", "each", d.var("xs"), d.fn(["x"], d.var("x"))),
    d.remote("Enum", "map", d.var("xs"), d.fn(["x"], d.remote("IO", "puts", d.var("x")))),
    n.Pipe(d.var("xs"), d.remote("Enum", "map", d.fn(["x"], d.call("save", d.var("x"))))),
    d.raw("x + 1"),
    n.Template("<p>hi</p>"),
    n.Raise(d.var("ArgumentError"), n.Str("bad")),
    n.DynamicCall(d.var("f"), ()),
    d.binop("+", d.var("a"), d.call("compute")),
  ],
)
def test_impure(tree):
  assert not is_pure(tree)


def test_remote_call_on_dynamic_module_is_impure():
  assert not is_pure(n.RemoteCall(d.var("mod"), "run", ()))
