"""
Tree Transformer.

The single traversal primitive every pass is built on. A traversal performs
exactly one bottom-up sweep: every descendant is fully rewritten before the
visitor sees its parent, and replacement nodes returned by the visitor are not
visited again. Passes that need convergence must be stable after one sweep or
be scheduled twice by the pipeline.

Two forms are provided:

1.  ``transform(root, visit)``: the functional form. ``visit`` receives each
    rebuilt node (or pattern) and returns it unchanged or a replacement.
2.  ``TreeTransformer``: the class form, modelled on a LibCST transformer.
    ``visit_<Shape>(node)`` runs top-down and may return ``False`` to skip the
    children; ``leave_<Shape>(original, updated)`` runs bottom-up and returns
    the replacement. The stack of original ancestors is available while a
    node is being processed, so a pass can ask which construct owns it.

Unchanged subtrees keep their identity, so a sweep that rewrites nothing
returns the very same root object.
"""

from dataclasses import fields
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from idiomizer.core.base import TreeItem
from idiomizer.errors import MalformedTreeError

Visitor = Callable[[TreeItem], TreeItem]

_SCALARS = (str, int, float, bool)
_FIELD_CACHE: Dict[type, Tuple[str, ...]] = {}


def _child_fields(cls: type) -> Tuple[str, ...]:
  """Returns the names of the structural fields of a node class (cached)."""
  names = _FIELD_CACHE.get(cls)
  if names is None:
    names = tuple(f.name for f in fields(cls) if f.name not in ("meta", "pos"))
    _FIELD_CACHE[cls] = names
  return names


def _map_value(value, fn: Visitor):
  """Applies ``fn`` to every tree item inside a field value, sharing unchanged containers."""
  if isinstance(value, TreeItem):
    return fn(value)
  if isinstance(value, tuple):
    mapped = tuple(_map_value(v, fn) for v in value)
    if all(a is b for a, b in zip(mapped, value)):
      return value
    return mapped
  if value is None or isinstance(value, _SCALARS):
    return value
  raise MalformedTreeError(f"Unsupported value in tree: {type(value).__name__}")


def map_children(item: TreeItem, fn: Visitor) -> TreeItem:
  """
  Rebuilds ``item`` with ``fn`` applied to each direct child.

  Args:
      item: The node or pattern whose children are mapped.
      fn: Mapping applied to each direct child tree item.

  Returns:
      TreeItem: ``item`` itself when no child changed, otherwise a copy
      carrying the same metadata and position.
  """
  changes = {}
  for name in _child_fields(type(item)):
    value = getattr(item, name)
    mapped = _map_value(value, fn)
    if mapped is not value:
      changes[name] = mapped
  if not changes:
    return item
  return item.with_changes(**changes)


def _iter_value(value) -> Iterator[TreeItem]:
  if isinstance(value, TreeItem):
    yield value
  elif isinstance(value, tuple):
    for v in value:
      yield from _iter_value(v)


def iter_children(item: TreeItem) -> Iterator[TreeItem]:
  """
  Yields the direct child nodes and patterns of ``item`` in field order.

  Args:
      item: The parent tree item.

  Yields:
      TreeItem: Each direct child.
  """
  for name in _child_fields(type(item)):
    yield from _iter_value(getattr(item, name))


def walk(root: TreeItem) -> Iterator[TreeItem]:
  """
  Yields ``root`` and all of its descendants in pre-order.

  Args:
      root: The subtree to traverse.

  Yields:
      TreeItem: Every node and pattern of the subtree.
  """
  stack = [root]
  while stack:
    item = stack.pop()
    yield item
    stack.extend(reversed(list(iter_children(item))))


class TreeTransformer:
  """
  Base class for bottom-up tree rewriting with optional top-down hooks.

  Subclasses define ``visit_<Shape>`` / ``leave_<Shape>`` methods named after
  node or pattern classes. Shapes without a ``leave_`` method are returned
  unchanged (the identity arm).
  """

  def __init__(self) -> None:
    self._ancestors: List[TreeItem] = []

  @property
  def ancestors(self) -> Tuple[TreeItem, ...]:
    """Original (pre-rewrite) ancestors of the item being processed, outermost first."""
    return tuple(self._ancestors)

  @property
  def parent(self) -> Optional[TreeItem]:
    """Original parent of the item being processed, if any."""
    return self._ancestors[-1] if self._ancestors else None

  def on_visit(self, item: TreeItem) -> bool:
    """
    Top-down hook. Dispatches to ``visit_<Shape>``.

    Args:
        item: The original item about to be traversed.

    Returns:
        bool: False to skip traversal of the children.
    """
    method = getattr(self, f"visit_{type(item).__name__}", None)
    if method is None:
      return True
    return method(item) is not False

  def on_leave(self, original: TreeItem, updated: TreeItem) -> TreeItem:
    """
    Bottom-up hook. Dispatches to ``leave_<Shape>``.

    Args:
        original: The item before its children were rewritten.
        updated: The item with rewritten children.

    Returns:
        TreeItem: The replacement for ``original``.
    """
    method = getattr(self, f"leave_{type(original).__name__}", None)
    if method is None:
      return updated
    return method(original, updated)

  def transform(self, root: TreeItem) -> TreeItem:
    """
    Runs one sweep over ``root``.

    Args:
        root: The tree to rewrite.

    Returns:
        TreeItem: The rewritten tree.
    """
    return self._walk(root)

  def _walk(self, item: TreeItem) -> TreeItem:
    if self.on_visit(item):
      self._ancestors.append(item)
      try:
        updated = map_children(item, self._walk)
      finally:
        self._ancestors.pop()
    else:
      updated = item
    result = self.on_leave(item, updated)
    if not isinstance(result, TreeItem):
      raise MalformedTreeError(f"leave hook for {type(item).__name__} returned {type(result).__name__}")
    return result


class _FunctionTransformer(TreeTransformer):
  """Adapts a plain visit function to the class form."""

  def __init__(self, visit: Visitor) -> None:
    super().__init__()
    self._visit = visit

  def on_leave(self, original: TreeItem, updated: TreeItem) -> TreeItem:
    return self._visit(updated)


def transform(root: TreeItem, visit: Visitor) -> TreeItem:
  """
  Rewrites a tree bottom-up in one sweep.

  Every descendant is rewritten before ``visit`` is applied to its parent.
  ``visit`` must return the node it was given when it does not target it.

  Args:
      root: The tree to rewrite.
      visit: Function applied to every rebuilt node and pattern.

  Returns:
      TreeItem: The rewritten tree.
  """
  return _FunctionTransformer(visit).transform(root)
