"""
Assignment Block Hoisting.

Rewrites ``a = (b = compute(); expr)`` into the two statements
``b = compute()`` and ``a = expr``. A parenthesized block does not open a
scope, so its bindings were already visible after the assignment; hoisting
keeps evaluation order and binding visibility and yields the flat shape the
printer expects.
"""

from typing import List, Optional, Tuple

from idiomizer.analysis.usage import leaking_binders
from idiomizer.core import nodes as n
from idiomizer.core import patterns as p
from idiomizer.core.rewriter.base import PassTransformer, TransformerPass
from idiomizer.core.transformer import walk
from idiomizer.enums import PassFamily


def _hoistable(value: n.Node) -> Optional[Tuple[n.Node, ...]]:
  if isinstance(value, n.Paren):
    value = value.expr
  if isinstance(value, n.Block) and len(value.statements) >= 2:
    return value.statements
  return None


def _pinned_names(pattern: p.Pattern):
  return {sub.name for sub in walk(pattern) if isinstance(sub, p.PPin)}


def hoist_statement(stmt: n.Node) -> List[n.Node]:
  """
  Splits a match whose right-hand side is a multi-statement block.

  Args:
      stmt: A statement.

  Returns:
      List[n.Node]: The replacement statements (``[stmt]`` when not applicable).
  """
  if not isinstance(stmt, n.Match):
    return [stmt]
  inner = _hoistable(stmt.value)
  if inner is None:
    return [stmt]
  prefix = inner[:-1]
  bound = set()
  for s in prefix:
    bound |= leaking_binders(s)
  if _pinned_names(stmt.pattern) & bound:
    return [stmt]
  result: List[n.Node] = []
  for s in prefix:
    result.extend(hoist_statement(s))
  result.extend(hoist_statement(stmt.with_changes(value=inner[-1])))
  return result


class AssignmentHoistTransformer(PassTransformer):
  """
  Hoists the leading statements of assigned blocks into the enclosing block.
  """

  def leave_Block(self, original: n.Block, updated: n.Block) -> n.Node:
    statements: List[n.Node] = []
    changed = False
    for stmt in updated.statements:
      replacement = hoist_statement(stmt)
      if len(replacement) != 1 or replacement[0] is not stmt:
        changed = True
        self.record()
      statements.extend(replacement)
    if not changed:
      return updated
    return updated.with_changes(statements=tuple(statements))


class AssignmentBlockHoistPass(TransformerPass):
  """
  Flattens ``a = (stmts; expr)`` into ``stmts; a = expr``.
  """

  name = "assignment_block_hoist"
  family = PassFamily.CHAIN_COLLAPSE
  transformer_class = AssignmentHoistTransformer
