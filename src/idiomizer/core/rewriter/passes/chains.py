"""
Redundant-Chain Collapse Passes.

1.  **Temporary chains**: ``tmp = expr; dst = tmp`` where ``tmp`` is a
    compiler temporary read nowhere else collapses to ``dst = expr``. The
    nested form ``dst = (tmp = expr)`` collapses identically.
2.  **Trailing bindings**: a scope that ends with ``x = expr; x`` ends with
    ``expr`` instead.

Both only rewrite whole scopes (a scope body or the traversal root), because
the bindings of a nested bare block remain visible after it.
"""

from typing import List, Optional

from idiomizer.analysis.usage import is_referenced, references
from idiomizer.core import nodes as n
from idiomizer.core import patterns as p
from idiomizer.core.names import is_compiler_temp
from idiomizer.core.rewriter.base import PassTransformer, TransformerPass
from idiomizer.enums import PassFamily


class TempChainTransformer(PassTransformer):
  """
  Removes single-use compiler temporaries between a value and its destination.
  """

  def _temp_binder(self, stmt: n.Node) -> Optional[str]:
    if isinstance(stmt, n.Match) and isinstance(stmt.pattern, p.PVar):
      name = stmt.pattern.name
      if is_compiler_temp(name, stmt.pattern.meta, self.config):
        return name
    return None

  def _collapse_nested(self, stmt: n.Node, rest: List[n.Node]) -> n.Node:
    """``dst = (tmp = expr)`` becomes ``dst = expr`` when ``tmp`` is dead."""
    if not isinstance(stmt, n.Match):
      return stmt
    inner = stmt.value
    if isinstance(inner, n.Paren):
      inner = inner.expr
    temp = self._temp_binder(inner)
    if temp is None:
      return stmt
    if references(stmt.pattern, temp) or is_referenced(rest, 0, temp):
      return stmt
    self.record()
    return self._collapse_nested(stmt.with_changes(value=inner.value), rest)

  def _collapse_all_nested(self, statements: List[n.Node]) -> bool:
    changed = False
    for index, stmt in enumerate(statements):
      collapsed = self._collapse_nested(stmt, statements[index + 1 :])
      if collapsed is not stmt:
        statements[index] = collapsed
        changed = True
    return changed

  def _collapse_pairs(self, statements: List[n.Node]) -> bool:
    changed = False
    index = 0
    while index < len(statements):
      if index + 1 < len(statements):
        first, second = statements[index], statements[index + 1]
        temp = self._temp_binder(first)
        if (
          temp is not None
          and isinstance(second, n.Match)
          and isinstance(second.value, n.Var)
          and second.value.name == temp
          and not references(second.pattern, temp)
          and not is_referenced(statements, index + 2, temp)
        ):
          statements[index : index + 2] = [second.with_changes(value=first.value)]
          self.record()
          changed = True
          continue
      index += 1
    return changed

  def leave_Block(self, original: n.Block, updated: n.Block) -> n.Node:
    if not self.is_flat_scope(original):
      return updated
    statements = list(updated.statements)
    changed = False
    # A collapse can free a temporary read by an earlier statement.
    while True:
      nested = self._collapse_all_nested(statements)
      pairs = self._collapse_pairs(statements)
      if not (nested or pairs):
        break
      changed = True

    if not changed:
      return updated
    return updated.with_changes(statements=tuple(statements))


class TempChainCollapsePass(TransformerPass):
  """
  Collapses ``tmp = expr; dst = tmp`` into ``dst = expr``.
  """

  name = "temp_chain_collapse"
  family = PassFamily.CHAIN_COLLAPSE
  transformer_class = TempChainTransformer


class TrailingBindingTransformer(PassTransformer):
  """
  Replaces a trailing ``x = expr; x`` with ``expr``.
  """

  def leave_Block(self, original: n.Block, updated: n.Block) -> n.Node:
    if not self.is_flat_scope(original):
      return updated
    statements = list(updated.statements)
    changed = False
    while len(statements) >= 2:
      binding, result = statements[-2], statements[-1]
      if not (
        isinstance(binding, n.Match)
        and isinstance(binding.pattern, p.PVar)
        and isinstance(result, n.Var)
        and result.name == binding.pattern.name
      ):
        break
      statements[-2:] = [binding.value]
      self.record()
      changed = True

    if not changed:
      return updated
    return updated.with_changes(statements=tuple(statements))


class TrailingBindingReturnPass(TransformerPass):
  """
  Returns the bound expression directly instead of binding then reading it.
  """

  name = "trailing_binding_return"
  family = PassFamily.CHAIN_COLLAPSE
  transformer_class = TrailingBindingTransformer
