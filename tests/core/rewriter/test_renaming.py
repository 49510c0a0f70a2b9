"""
Tests for the shared name substitution helpers.
"""

from idiomizer.core import dsl as d
from idiomizer.core import nodes as n
from idiomizer.core import patterns as p
from idiomizer.core.rewriter.renaming import renamable, rename_names, substitute_reads


def _sample():
  return d.block(
    d.bind(d.ptup("x", p.PPin("x"), p.PAlias(d.ptup("y"), "x")), d.var("x")),
    d.raw("IO.inspect(x, label: x_label)"),
    n.Template("<p>{x}</p>"),
  )


def test_rename_names_covers_reads_binders_and_text():
  result = rename_names(_sample(), {"x": "item"})
  assert result == d.block(
    d.bind(d.ptup("item", p.PPin("item"), p.PAlias(d.ptup("y"), "item")), d.var("item")),
    d.raw("IO.inspect(item, label: x_label)"),
    n.Template("<p>{item}</p>"),
  )


def test_substitute_reads_keeps_binders():
  result = substitute_reads(_sample(), {"x": "item"})
  assert result.statements[0] == d.bind(d.ptup("x", p.PPin("item"), p.PAlias(d.ptup("y"), "x")), d.var("item"))
  assert result.statements[1] == d.raw("IO.inspect(item, label: x_label)")


def test_empty_mapping_is_identity():
  tree = _sample()
  assert rename_names(tree, {}) is tree
  assert substitute_reads(tree, {}) is tree


def test_unrelated_names_keep_identity():
  tree = d.block(d.bind("a", 1), d.var("a"))
  assert rename_names(tree, {"x": "y"}) is tree


def test_metadata_survives_rename():
  binder = d.pvar("x1", loop_origin="item")
  result = rename_names(d.bind(binder, 1), {"x1": "item"})
  assert result.pattern.name == "item"
  assert result.pattern.meta.loop_origin_name == "item"


def test_renamable_checks_every_opaque_fragment():
  assert renamable("x", _sample())
  assert renamable("x", None, d.var("x"))
  assert not renamable("x", _sample(), d.raw("Map.get(x, :x)"))
  assert not renamable("x", n.Template("<p>x</p><%= x %>"))
