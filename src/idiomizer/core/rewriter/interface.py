"""
Interface definition for Rewriter Passes.

This module defines the abstract base class that all rewrite passes must
implement to be scheduled by the ``RewriterPipeline``.
"""

from abc import ABC, abstractmethod

from idiomizer.core.nodes import Node
from idiomizer.core.rewriter.context import RewriterContext
from idiomizer.enums import PassFamily


class RewriterPass(ABC):
  """
  Abstract contract for a rewrite pass.

  A pass is a pure function from tree to tree: it recognizes narrow shapes
  (its shape predicate), rebuilds them from the matched subtree and, for the
  block-local passes, the sibling statements of the same block, and returns
  every other shape unchanged. Applying a pass to its own output must not
  change the shapes it targets.

  Attributes:
      name (str): Stable identifier used in the pipeline order.
      family (PassFamily): The concern the pass belongs to.
  """

  name: str = ""
  family: PassFamily = PassFamily.PRINTER_SHAPE

  @abstractmethod
  def transform(self, tree: Node, context: RewriterContext) -> Node:
    """
    Executes the rewrite on the given tree.

    Args:
        tree: The input tree.
        context: The per-run context containing configuration and trace state.

    Returns:
        The rewritten tree (the same object when nothing matched).
    """
    pass

  def __repr__(self) -> str:
    return f"{type(self).__name__}({self.name!r})"
