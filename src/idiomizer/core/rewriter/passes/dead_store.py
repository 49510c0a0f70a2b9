"""
Dead-Store Passes.

1.  **Self assignment**: ``x = x`` rebinds a name to its own value and is
    removed (a trailing one is reduced to the read ``x`` so the block keeps
    its value).
2.  **Dead-store discard**: a block-level ``name = expr`` whose name is never
    read later in the same scope is rewritten to ``_name = expr``. ``expr`` is
    still evaluated. Reserved environment names are never discarded, and a
    binder in a comprehension body is kept unless ``expr`` is provably pure.
"""

from typing import List

from idiomizer.analysis.purity import is_pure
from idiomizer.analysis.usage import UsageIndex
from idiomizer.core import nodes as n
from idiomizer.core import patterns as p
from idiomizer.core.names import decorated, is_discard, is_reserved, is_wildcard
from idiomizer.core.rewriter.base import PassTransformer, TransformerPass
from idiomizer.enums import PassFamily


def _is_self_assignment(stmt: n.Node) -> bool:
  return (
    isinstance(stmt, n.Match)
    and isinstance(stmt.pattern, p.PVar)
    and isinstance(stmt.value, n.Var)
    and stmt.pattern.name == stmt.value.name
  )


class SelfAssignmentTransformer(PassTransformer):
  """
  Removes ``x = x`` statements.
  """

  def leave_Block(self, original: n.Block, updated: n.Block) -> n.Node:
    statements: List[n.Node] = []
    last = len(updated.statements) - 1
    for index, stmt in enumerate(updated.statements):
      if not _is_self_assignment(stmt):
        statements.append(stmt)
        continue
      self.record()
      if index == last:
        statements.append(stmt.value)
    if len(statements) == len(updated.statements) and all(a is b for a, b in zip(statements, updated.statements)):
      return updated
    return updated.with_changes(statements=tuple(statements))


class SelfAssignmentRemovalPass(TransformerPass):
  """
  Drops no-op rebinding of a name to itself.
  """

  name = "self_assignment_removal"
  family = PassFamily.DEAD_STORE
  transformer_class = SelfAssignmentTransformer


class DeadStoreTransformer(PassTransformer):
  """
  Marks block-level binders that are never read again as discarded.
  """

  def _discardable(self, name: str) -> bool:
    return not (is_wildcard(name) or is_discard(name) or is_reserved(name, self.config))

  def leave_Block(self, original: n.Block, updated: n.Block) -> n.Node:
    if not self.is_flat_scope(original):
      return updated
    in_comprehension = self.in_comprehension_body(original)
    usage = UsageIndex(updated.statements)
    statements = list(updated.statements)
    changed = False

    for index, stmt in enumerate(updated.statements):
      if not isinstance(stmt, n.Match) or not isinstance(stmt.pattern, p.PVar):
        continue
      name = stmt.pattern.name
      if not self._discardable(name):
        continue
      if usage.is_referenced(index + 1, name):
        continue
      discarded = decorated(name)
      if usage.is_referenced(index + 1, discarded):
        continue
      if in_comprehension and not is_pure(stmt.value):
        continue
      statements[index] = stmt.with_changes(pattern=stmt.pattern.with_changes(name=discarded))
      self.record()
      changed = True

    if not changed:
      return updated
    return updated.with_changes(statements=tuple(statements))


class DeadStoreDiscardPass(TransformerPass):
  """
  Rewrites unread block-level bindings to discard binders.
  """

  name = "dead_store_discard"
  family = PassFamily.DEAD_STORE
  transformer_class = DeadStoreTransformer
