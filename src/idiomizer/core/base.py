"""
Shared base for tree elements.

Both expression/statement nodes and binder patterns derive from ``TreeItem``,
which carries the metadata bag and the source position. Neither takes part in
structural equality: two trees that differ only in metadata compare equal.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Optional

from idiomizer.core.metadata import EMPTY_META, NodeMeta, SourcePos


@dataclass(frozen=True)
class TreeItem:
  """Root of the node and pattern hierarchies."""

  meta: NodeMeta = field(default=EMPTY_META, compare=False, repr=False, kw_only=True)
  pos: Optional[SourcePos] = field(default=None, compare=False, repr=False, kw_only=True)

  def with_changes(self, **changes: Any) -> "TreeItem":
    """
    Returns a copy with the given fields replaced.

    Metadata and position are carried over unless explicitly overridden.

    Args:
        **changes: Field values to replace.

    Returns:
        TreeItem: The updated copy (or ``self`` when nothing changes).
    """
    if all(getattr(self, key) is value for key, value in changes.items()):
      return self
    return replace(self, **changes)

  def with_meta(self, **fields: Any) -> "TreeItem":
    """
    Returns a copy whose metadata has the given fields set.

    Args:
        **fields: ``NodeMeta`` field values.

    Returns:
        TreeItem: The copy carrying the updated metadata.
    """
    merged = self.meta.model_dump()
    merged.update(fields)
    return replace(self, meta=NodeMeta(**merged))

  def visit(self, transformer) -> "TreeItem":
    """
    Runs a ``TreeTransformer`` over this subtree.

    Args:
        transformer: The transformer instance.

    Returns:
        TreeItem: The rewritten subtree.
    """
    return transformer.transform(self)

  def __str__(self) -> str:
    from idiomizer.core.printer import render

    return render(self)
