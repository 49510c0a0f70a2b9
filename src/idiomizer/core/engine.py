"""
Normalization Engine.

This module provides the ``NormalizerEngine``, the driver that turns one
generated intermediate tree into its idiomatic, semantically equivalent form.

For every ``run``:

1.  A fresh ``RewriterContext`` and ``TraceLogger`` are created, so runs share
    nothing but the read-only configuration and units can be normalized in
    parallel.
2.  The ``RewriterPipeline`` built from ``DEFAULT_PASS_ORDER`` (or a custom
    order) is applied exactly once.
3.  The final tree, the names of the passes that changed it and the trace
    events are returned as a ``NormalizationResult``.

The project name consulted by the qualification pass is threaded in through
the ``RuntimeConfig`` given to the constructor, never looked up by passes.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field, InstanceOf

from idiomizer.config import RuntimeConfig
from idiomizer.core.nodes import Node
from idiomizer.core.printer import render
from idiomizer.core.rewriter.context import RewriterContext
from idiomizer.core.rewriter.pipeline import DEFAULT_PASS_ORDER, build_pipeline
from idiomizer.core.tracer import TraceLogger
from idiomizer.errors import MalformedTreeError
from idiomizer.utils.console import log_success

logger = logging.getLogger(__name__)


class NormalizationResult(BaseModel):
  """
  Structured result of normalizing a single tree.
  """

  tree: InstanceOf[Node] = Field(description="The normalized tree.")
  changed_passes: List[str] = Field(
    default_factory=list,
    description="Names of the pass applications that changed the tree, in order.",
  )
  rewrite_counts: Dict[str, int] = Field(default_factory=dict, description="Rewrites performed, per pass name.")
  trace_events: List[Dict[str, Any]] = Field(default_factory=list, description="A log of internal trace events.")

  @property
  def changed(self) -> bool:
    """
    Returns True if any pass rewrote the tree.

    Returns:
        bool: True if ``changed_passes`` is non-empty.
    """
    return len(self.changed_passes) > 0

  @property
  def text(self) -> str:
    """Debug rendering of the normalized tree."""
    return render(self.tree)


class NormalizerEngine:
  """
  The main normalization unit.

  Holds the read-only configuration and the pass order; every call to ``run``
  is independent of the previous ones.
  """

  def __init__(self, config: Optional[RuntimeConfig] = None, pass_order: Sequence[str] = DEFAULT_PASS_ORDER) -> None:
    """
    Initializes the Engine.

    Args:
        config (RuntimeConfig, optional): The runtime configuration object.
            Loaded from ``pyproject.toml`` (or defaults) when omitted.
        pass_order: Names of the passes to apply, in order.
    """
    self.config = config or RuntimeConfig.load()
    self.pass_order = tuple(pass_order)
    # Fails early on unknown pass names.
    build_pipeline(self.pass_order)

  def run(self, tree: Node) -> NormalizationResult:
    """
    Normalizes one tree.

    Args:
        tree (Node): The generated tree of one compilation unit.

    Returns:
        NormalizationResult: The normalized tree plus change and trace records.

    Raises:
        MalformedTreeError: If ``tree`` is not a node of the intermediate grammar.
    """
    if not isinstance(tree, Node):
      raise MalformedTreeError(f"Expected a tree node, got {type(tree).__name__}")

    tracer = TraceLogger()
    context = RewriterContext(self.config, tracer)
    pipeline = build_pipeline(self.pass_order)

    tracer.start_phase("Normalization", f"{len(self.pass_order)} passes")
    result_tree = pipeline.run(tree, context)
    tracer.end_phase()

    if context.changed_passes:
      log_success(f"Normalized tree; changed by: {', '.join(context.changed_passes)}")
    else:
      logger.debug("Tree already normalized")

    return NormalizationResult(
      tree=result_tree,
      changed_passes=list(context.changed_passes),
      rewrite_counts=dict(context.rewrite_counts),
      trace_events=tracer.export(),
    )
