"""
Rewriter Package.

The pass framework (``RewriterPass``, ``RewriterContext``, ``RewriterPipeline``)
and the catalog of rewrite passes under ``idiomizer.core.rewriter.passes``.
"""

from idiomizer.core.rewriter.context import RewriterContext
from idiomizer.core.rewriter.interface import RewriterPass
from idiomizer.core.rewriter.pipeline import DEFAULT_PASS_ORDER, PASS_REGISTRY, RewriterPipeline, build_pipeline

__all__ = [
  "DEFAULT_PASS_ORDER",
  "PASS_REGISTRY",
  "RewriterContext",
  "RewriterPass",
  "RewriterPipeline",
  "build_pipeline",
]
