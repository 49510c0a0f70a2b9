"""
Tests for the Normalization Engine.

Verifies:
1. A run returns the normalized tree with its change and trace records.
2. Runs are independent of each other.
3. Malformed input and unknown pass names are rejected.
"""

import io
import logging

import pytest
from rich.console import Console

from idiomizer.config import RuntimeConfig
from idiomizer.core import dsl as d
from idiomizer.core import nodes as n
from idiomizer.core.engine import NormalizationResult, NormalizerEngine
from idiomizer.core.tracer import TraceEventType
from idiomizer.errors import MalformedTreeError
from idiomizer.utils.console import PACKAGE_LOGGER, set_console


@pytest.fixture
def engine(config):
  return NormalizerEngine(config)


def test_run_reports_changes(engine):
  tree = d.block(d.bind("x", d.var("x")), d.bind("y", d.call("compute")), d.call("log", d.var("y")))
  result = engine.run(tree)

  assert isinstance(result, NormalizationResult)
  assert result.changed
  assert result.changed_passes == ["self_assignment_removal"]
  assert result.rewrite_counts == {"self_assignment_removal": 1}
  assert result.tree == d.block(d.bind("y", d.call("compute")), d.call("log", d.var("y")))
  assert "compute()" in result.text


def test_changing_run_logs_success(engine):
  recording = Console(record=True, file=io.StringIO(), width=200)
  set_console(recording)
  logger = logging.getLogger(PACKAGE_LOGGER)
  level = logger.level
  logger.setLevel(logging.INFO)
  try:
    engine.run(d.block(d.bind("x", d.var("x")), d.bind("y", d.call("compute")), d.call("log", d.var("y"))))
  finally:
    logger.setLevel(level)
  assert "changed by: self_assignment_removal" in recording.export_text()


def test_normal_tree_is_unchanged(engine):
  tree = d.defn("total", ["xs"], d.remote("Enum", "sum", d.var("xs")))
  result = engine.run(tree)
  assert not result.changed
  assert result.tree == tree
  assert result.rewrite_counts == {}


def test_trace_wraps_every_pass(engine):
  result = engine.run(d.var("x"))
  events = result.trace_events
  starts = [e for e in events if e["type"] == TraceEventType.PHASE_START]

  assert starts[0]["description"] == "Normalization"
  assert [e["description"] for e in starts[1:]] == list(engine.pass_order)
  assert all(e["parent_id"] == starts[0]["id"] for e in starts[1:])
  assert events[-1]["type"] == TraceEventType.PHASE_END


def test_runs_are_independent(engine):
  first = engine.run(d.block(d.bind("x", d.var("x")), d.var("y")))
  second = engine.run(d.var("y"))
  assert first.changed
  assert not second.changed
  assert len(second.trace_events) == len(engine.run(d.var("y")).trace_events)


def test_custom_order():
  engine = NormalizerEngine(RuntimeConfig(), pass_order=["dead_store_discard"])
  result = engine.run(d.block(d.bind("x", 1), d.bind("y", 2), d.var("y")))
  assert result.tree == d.block(d.bind("_x", 1), d.bind("y", 2), d.var("y"))
  assert result.changed_passes == ["dead_store_discard"]


def test_project_name_comes_from_config():
  module = d.defn("all", [], d.remote("Repo", "all", d.var("q")))
  tree = n.Module("TodoApp.Todos", (module,))
  result = NormalizerEngine(RuntimeConfig(project_name="TodoApp")).run(tree)
  assert result.changed_passes == ["repo_qualification"]
  assert NormalizerEngine(RuntimeConfig()).run(tree).changed is False


def test_malformed_input(engine):
  with pytest.raises(MalformedTreeError):
    engine.run("x = 1")


def test_malformed_child_is_reported(engine):
  with pytest.raises(MalformedTreeError):
    engine.run(n.Block(([1, 2],)))


def test_unknown_pass_fails_at_construction():
  with pytest.raises(KeyError):
    NormalizerEngine(RuntimeConfig(), pass_order=["printer_shape_repair", "typo"])
