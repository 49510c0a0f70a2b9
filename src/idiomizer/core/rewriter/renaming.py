"""
Name substitution helpers shared by the renaming passes.

Renames cover every place a name can appear: variable reads, binders in
patterns, pinned references and, through the shared token-boundary routine,
opaque fragments. Metadata and positions of renamed nodes are preserved.

A pass must check ``renamable`` before renaming: a name that an opaque
fragment uses as anything but a plain variable is left alone everywhere.
"""

from typing import Mapping, Optional

from idiomizer.core import nodes as n
from idiomizer.core import patterns as p
from idiomizer.core.base import TreeItem
from idiomizer.core.opaque import is_renamable, replace_identifier
from idiomizer.core.transformer import transform, walk


def _rename_text(text: str, mapping: Mapping[str, str]) -> str:
  for old, new in mapping.items():
    text = replace_identifier(text, old, new)
  return text


def rename_names(item: TreeItem, mapping: Mapping[str, str]) -> TreeItem:
  """
  Renames reads and binders of the given names throughout a subtree.

  Args:
      item: The subtree to rewrite.
      mapping: Old name to new name.

  Returns:
      TreeItem: The rewritten subtree.
  """
  if not mapping:
    return item

  def visit(node: TreeItem) -> TreeItem:
    if isinstance(node, (n.Var, p.PVar, p.PPin, p.PAlias)) and node.name in mapping:
      return node.with_changes(name=mapping[node.name])
    if isinstance(node, n.Raw):
      return node.with_changes(code=_rename_text(node.code, mapping))
    if isinstance(node, n.Template):
      return node.with_changes(content=_rename_text(node.content, mapping))
    return node

  return transform(item, visit)


def substitute_reads(item: TreeItem, mapping: Mapping[str, str]) -> TreeItem:
  """
  Renames only reads (variables, pins, opaque text), leaving binders intact.

  Args:
      item: The subtree to rewrite.
      mapping: Old name to new name.

  Returns:
      TreeItem: The rewritten subtree.
  """
  if not mapping:
    return item

  def visit(node: TreeItem) -> TreeItem:
    if isinstance(node, (n.Var, p.PPin)) and node.name in mapping:
      return node.with_changes(name=mapping[node.name])
    if isinstance(node, n.Raw):
      return node.with_changes(code=_rename_text(node.code, mapping))
    if isinstance(node, n.Template):
      return node.with_changes(content=_rename_text(node.content, mapping))
    return node

  return transform(item, visit)


def renamable(name: str, *items: Optional[TreeItem]) -> bool:
  """
  Checks whether every opaque occurrence of ``name`` can be renamed.

  Args:
      name: The name a pass wants to rename.
      *items: The subtrees the rename would cover (``None`` entries are skipped).

  Returns:
      bool: False when a fragment inside ``items`` uses ``name`` as a field,
      atom, keyword key, string content or template markup.
  """
  for item in items:
    if item is None:
      continue
    for node in walk(item):
      if isinstance(node, n.Raw) and not is_renamable(node.code, name):
        return False
      if isinstance(node, n.Template) and not is_renamable(node.content, name, template=True):
        return False
  return True
