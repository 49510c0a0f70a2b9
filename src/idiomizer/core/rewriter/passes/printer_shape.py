"""
Printer-Shape Repair Passes.

The printer can only serialize a subset of the shapes the grammar allows.
Earlier passes (and the tree builder) can leave behind:

1.  **Nested blocks**: a block, or a parenthesized block, as a statement of
    another block. Its statements are spliced into the parent; a nested block
    is never a scope of its own, so bindings keep their visibility.
2.  **Blocks in expression position**: an empty block becomes ``nil``, a
    single-statement block becomes that statement, and a longer block is
    wrapped in parentheses.
3.  **Redundant parentheses**: doubled parentheses and parentheses around
    atomic expressions.
4.  **Empty else branches**: ``else nil`` is dropped (handled by
    ``EmptyElseRemovalPass``, scheduled separately).
"""

from typing import List

from idiomizer.analysis.scopes import is_scope_body
from idiomizer.core import nodes as n
from idiomizer.core.rewriter.base import PassTransformer, TransformerPass
from idiomizer.enums import PassFamily

_ATOMIC = n.LITERAL_TYPES + (
  n.Var,
  n.Attr,
  n.ModuleRef,
  n.CaptureArg,
  n.TupleLit,
  n.ListLit,
  n.MapLit,
  n.StructLit,
)


def _nested_statements(stmt: n.Node):
  """Returns the statements of a spliceable nested block, or None."""
  if isinstance(stmt, n.Block):
    return stmt.statements
  if isinstance(stmt, n.Paren) and isinstance(stmt.expr, n.Block):
    return stmt.expr.statements
  return None


class PrinterShapeTransformer(PassTransformer):
  """
  Repairs block and parenthesis shapes the printer cannot emit.
  """

  def _position(self, original: n.Node) -> str:
    parent = self.parent
    if parent is None:
      return "root"
    if isinstance(parent, n.Block):
      return "statement"
    if isinstance(parent, n.Paren):
      return "paren"
    if isinstance(parent, n.Module) or is_scope_body(parent, original):
      return "body"
    return "expression"

  def leave_Block(self, original: n.Block, updated: n.Block) -> n.Node:
    statements: List[n.Node] = []
    spliced = False
    for index, stmt in enumerate(updated.statements):
      inner = _nested_statements(stmt)
      if inner is None:
        statements.append(stmt)
        continue
      spliced = True
      if inner:
        statements.extend(inner)
      elif index == len(updated.statements) - 1:
        statements.append(n.Nil())

    result = updated.with_changes(statements=tuple(statements)) if spliced else updated
    if spliced:
      self.record()

    position = self._position(original)
    if position in ("root", "statement", "body"):
      return result
    if not result.statements:
      self.record()
      return n.Nil(meta=result.meta, pos=result.pos)
    if len(result.statements) == 1:
      self.record()
      return result.statements[0]
    if position == "expression":
      self.record()
      return n.Paren(result, pos=result.pos)
    return result

  def leave_Paren(self, original: n.Paren, updated: n.Paren) -> n.Node:
    expr = updated.expr
    if isinstance(expr, n.Paren):
      self.record()
      return expr
    if isinstance(expr, _ATOMIC):
      self.record()
      return expr
    return updated


class PrinterShapeRepairPass(TransformerPass):
  """
  Splices nested blocks and removes redundant grouping.
  """

  name = "printer_shape_repair"
  family = PassFamily.PRINTER_SHAPE
  transformer_class = PrinterShapeTransformer


class EmptyElseTransformer(PassTransformer):
  """
  Drops ``else`` branches whose body is the literal ``nil``.
  """

  def _drop(self, updated: n.Node) -> n.Node:
    if isinstance(updated.else_, n.Nil):
      self.record()
      return updated.with_changes(else_=None)
    return updated

  def leave_If(self, original: n.If, updated: n.If) -> n.Node:
    return self._drop(updated)

  def leave_Unless(self, original: n.Unless, updated: n.Unless) -> n.Node:
    return self._drop(updated)


class EmptyElseRemovalPass(TransformerPass):
  """
  Removes ``else nil`` (a missing else branch already evaluates to nil).
  """

  name = "empty_else_removal"
  family = PassFamily.PRINTER_SHAPE
  transformer_class = EmptyElseTransformer
