"""
Sanity checks for the tree strategies used by property tests.
"""

from hypothesis import given, settings

from idiomizer.core import nodes as n
from idiomizer.core import patterns as p
from idiomizer.core.printer import render
from idiomizer.core.transformer import walk
from idiomizer.testing.strategies import NAMES, blocks, definitions, patterns


@given(patterns)
def test_patterns_are_patterns(pattern):
  assert isinstance(pattern, p.Pattern)
  for item in walk(pattern):
    if isinstance(item, (p.PVar, p.PPin, p.PAlias)):
      assert item.name in NAMES


@given(blocks)
@settings(max_examples=50, deadline=None)
def test_blocks_are_well_formed(block):
  assert isinstance(block, n.Block)
  assert 1 <= len(block.statements) <= 6
  for item in walk(block):
    assert isinstance(item, (n.Node, p.Pattern))
  assert isinstance(render(block), str)


@given(definitions)
@settings(max_examples=25, deadline=None)
def test_definitions_have_block_bodies(definition):
  assert isinstance(definition, n.Def)
  assert isinstance(definition.body, n.Block)
  assert len(definition.params) <= 3
