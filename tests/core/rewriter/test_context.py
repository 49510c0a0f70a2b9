"""
Tests for RewriterContext Mechanics.

Verifies:
1. Context instantiation and state initialization.
2. Property accessors for configuration.
3. Rewrite and change bookkeeping.
"""

from idiomizer.config import RuntimeConfig
from idiomizer.core.rewriter.context import RewriterContext
from idiomizer.core.tracer import TraceLogger


def test_context_state_initialization():
  ctx = RewriterContext()
  assert isinstance(ctx.config, RuntimeConfig)
  assert isinstance(ctx.tracer, TraceLogger)
  assert ctx.rewrite_counts == {}
  assert ctx.changed_passes == []
  assert ctx.project_name is None


def test_context_uses_given_config_and_tracer():
  cfg = RuntimeConfig(project_name="TodoApp")
  tracer = TraceLogger()
  ctx = RewriterContext(cfg, tracer)
  assert ctx.config is cfg
  assert ctx.tracer is tracer
  assert ctx.project_name == "TodoApp"


def test_contexts_do_not_share_state():
  first, second = RewriterContext(), RewriterContext()
  first.count_rewrite("dead_store_discard")
  assert second.rewrite_counts == {}
  assert first.tracer is not second.tracer


def test_count_rewrite_accumulates():
  ctx = RewriterContext()
  ctx.count_rewrite("dead_store_discard")
  ctx.count_rewrite("dead_store_discard", 2)
  ctx.count_rewrite("parameter_discard")
  assert ctx.rewrite_counts == {"dead_store_discard": 3, "parameter_discard": 1}


def test_mark_changed_keeps_every_application():
  ctx = RewriterContext()
  ctx.mark_changed("printer_shape_repair")
  ctx.mark_changed("dead_store_discard")
  ctx.mark_changed("printer_shape_repair")
  assert ctx.changed_passes == ["printer_shape_repair", "dead_store_discard", "printer_shape_repair"]
