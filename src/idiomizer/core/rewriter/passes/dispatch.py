"""
Dispatch Simplification Passes.

1.  **Constant conditions**: ``if``/``unless`` whose condition is a literal
    boolean or ``nil`` is replaced by the branch that always runs; ``cond``
    arms with a literal falsy condition are dropped and a leading literal
    ``true`` arm replaces the whole ``cond``. A branch is only inlined when it
    binds nothing, since inlining would let its bindings leak.
2.  **Unreachable clauses**: clauses that follow an unguarded catch-all
    clause of a ``case``/``receive``, and ``cond`` arms after a literal
    ``true`` arm, can never run and are removed.
"""

from typing import Optional, Tuple

from idiomizer.analysis.usage import leaking_binders
from idiomizer.core import nodes as n
from idiomizer.core import patterns as p
from idiomizer.core.rewriter.base import PassTransformer, TransformerPass
from idiomizer.enums import PassFamily


def _truthiness(node: n.Node) -> Optional[bool]:
  """Returns the truthiness of a literal condition, or None when unknown."""
  if isinstance(node, n.Bool):
    return node.value
  if isinstance(node, n.Nil):
    return False
  return None


def _binds_anything(body: Optional[n.Node]) -> bool:
  for stmt in n.as_statements(body):
    if leaking_binders(stmt):
      return True
  return False


class ConstantConditionTransformer(PassTransformer):
  """
  Inlines branches selected by literal conditions.
  """

  def _select(self, updated: n.Node, truthy: bool) -> n.Node:
    branch = updated.then if truthy else updated.else_
    if _binds_anything(branch):
      return updated
    self.record()
    return branch if branch is not None else n.Nil(pos=updated.pos)

  def leave_If(self, original: n.If, updated: n.If) -> n.Node:
    value = _truthiness(updated.cond)
    if value is None:
      return updated
    return self._select(updated, value)

  def leave_Unless(self, original: n.Unless, updated: n.Unless) -> n.Node:
    value = _truthiness(updated.cond)
    if value is None:
      return updated
    return self._select(updated, not value)

  def leave_Cond(self, original: n.Cond, updated: n.Cond) -> n.Node:
    kept = tuple(c for c in updated.clauses if _truthiness(c.cond) is not False)
    if not kept:
      # No arm can match: evaluation raises.
      return updated
    first = kept[0]
    if _truthiness(first.cond) is True and not _binds_anything(first.body):
      self.record()
      return first.body
    if len(kept) != len(updated.clauses):
      self.record()
      return updated.with_changes(clauses=kept)
    return updated


class ConstantConditionPass(TransformerPass):
  """
  Replaces dispatch on literal conditions with the branch that runs.
  """

  name = "constant_condition"
  family = PassFamily.DISPATCH
  transformer_class = ConstantConditionTransformer


def is_catch_all(clause: n.Clause) -> bool:
  """
  Checks whether a clause matches every value.

  Args:
      clause: A dispatch clause.

  Returns:
      bool: True for an unguarded clause whose patterns are all variables or wildcards.
  """
  if clause.guard is not None:
    return False
  return all(isinstance(pattern, (p.PVar, p.PWildcard)) for pattern in clause.patterns)


def _truncate(clauses: Tuple[n.Clause, ...]) -> Tuple[n.Clause, ...]:
  for index, clause in enumerate(clauses):
    if is_catch_all(clause):
      return clauses[: index + 1]
  return clauses


class UnreachableClauseTransformer(PassTransformer):
  """
  Drops clauses shadowed by an earlier catch-all.
  """

  def leave_Case(self, original: n.Case, updated: n.Case) -> n.Node:
    kept = _truncate(updated.clauses)
    if len(kept) == len(updated.clauses):
      return updated
    self.record(len(updated.clauses) - len(kept))
    return updated.with_changes(clauses=kept)

  def leave_Receive(self, original: n.Receive, updated: n.Receive) -> n.Node:
    kept = _truncate(updated.clauses)
    if len(kept) == len(updated.clauses):
      return updated
    self.record(len(updated.clauses) - len(kept))
    return updated.with_changes(clauses=kept)

  def leave_Cond(self, original: n.Cond, updated: n.Cond) -> n.Node:
    for index, arm in enumerate(updated.clauses):
      if _truthiness(arm.cond) is True and index < len(updated.clauses) - 1:
        self.record(len(updated.clauses) - index - 1)
        return updated.with_changes(clauses=updated.clauses[: index + 1])
    return updated


class UnreachableClauseRemovalPass(TransformerPass):
  """
  Removes dispatch clauses that can never be selected.
  """

  name = "unreachable_clause_removal"
  family = PassFamily.DISPATCH
  transformer_class = UnreachableClauseTransformer
