"""
Shared plumbing for transformer-backed passes.

Most passes are a ``TreeTransformer`` subclass plus a thin ``RewriterPass``
wrapper that instantiates it per run. ``PassTransformer`` carries the run
context and the scope questions block-local passes ask about the statement
list they are rewriting.
"""

from typing import Dict, Optional, Set, Type

from idiomizer.analysis.scopes import is_comprehension_body, is_scope_body
from idiomizer.analysis.usage import collect_possible_binders
from idiomizer.core import nodes as n
from idiomizer.core.base import TreeItem
from idiomizer.core.rewriter.context import RewriterContext
from idiomizer.core.rewriter.interface import RewriterPass
from idiomizer.core.transformer import TreeTransformer


class PassTransformer(TreeTransformer):
  """
  Base transformer for catalog passes.
  """

  pass_name: str = ""

  def __init__(self, context: RewriterContext) -> None:
    """
    Initialize.

    Args:
        context: The execution context.
    """
    super().__init__()
    self.context = context
    self.config = context.config
    self._root: Optional[TreeItem] = None
    self._unit_binders: Dict[int, Set[str]] = {}

  def transform(self, root: TreeItem) -> TreeItem:
    self._root = root
    return super().transform(root)

  def record(self, amount: int = 1) -> None:
    """Counts rewrites performed by this pass."""
    self.context.count_rewrite(self.pass_name, amount)

  def is_flat_scope(self, original: n.Block) -> bool:
    """
    Checks whether the block being left is a whole scope.

    The root of the traversal counts as one: nothing follows it.

    Args:
        original: The original block.

    Returns:
        bool: True if no statement outside the block can read its bindings.
    """
    if self.parent is None:
      return original is self._root
    return is_scope_body(self.parent, original)

  def in_comprehension_body(self, original: n.Block) -> bool:
    """Checks whether the block being left is the body of a ``for``."""
    return is_comprehension_body(self.parent, original)

  def unit(self) -> TreeItem:
    """
    The nearest enclosing definition, or the traversal root.

    Returns:
        TreeItem: The original unit owning the item being processed.
    """
    for owner in reversed(self.ancestors):
      if isinstance(owner, n.Def):
        return owner
    return self._root

  def unit_binders(self) -> Set[str]:
    """
    Every name possibly bound anywhere in the enclosing unit (original tree).

    Opaque fragments count as binding every identifier they contain.

    Returns:
        Set[str]: Bound names.
    """
    owner = self.unit()
    key = id(owner)
    if key not in self._unit_binders:
      self._unit_binders[key] = collect_possible_binders(owner)
    return self._unit_binders[key]


class TransformerPass(RewriterPass):
  """
  A pass implemented by a single ``PassTransformer`` sweep.
  """

  transformer_class: Type[PassTransformer] = PassTransformer

  def transform(self, tree: n.Node, context: RewriterContext) -> n.Node:
    """
    Executes one sweep of the pass transformer.

    Args:
        tree: The source tree.
        context: Shared state.

    Returns:
        The transformed tree.
    """
    transformer = self.transformer_class(context)
    transformer.pass_name = self.name
    return tree.visit(transformer)
