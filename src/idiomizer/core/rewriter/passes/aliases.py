"""
Alias Unification Passes.

Loop lowering produces fold callbacks that copy their binders into fresh
locals before using them::

    Enum.reduce(items, [], fn item, acc ->
      result = acc
      result = result ++ [item * 2]
      result
    end)

1.  **Accumulator aliases**: a local initialized from the accumulator binder
    and otherwise only rebound as "itself plus one appended element" is
    replaced by the accumulator itself; the copy disappears and every
    occurrence, including the self-append rebinds, uses the canonical name.
2.  **Element copies**: a local that is a plain copy of the element binder
    (of a fold callback or of a comprehension generator) is eliminated by
    substituting the element binder for it.
"""

from typing import Dict, List, Optional, Set, Tuple

from idiomizer.analysis.usage import collect_bound_names, collect_names, is_referenced, pattern_binders, references
from idiomizer.core import nodes as n
from idiomizer.core import patterns as p
from idiomizer.core.names import undecorated
from idiomizer.core.rewriter.base import PassTransformer, TransformerPass
from idiomizer.core.rewriter.renaming import renamable, rename_names, substitute_reads
from idiomizer.enums import NodeRole, PassFamily

FOLD_FUNCTIONS = frozenset({"reduce", "reduce_while", "map_reduce"})

ELEMENT_CALLBACK_FUNCTIONS = frozenset(
  {
    "reduce",
    "reduce_while",
    "map_reduce",
    "map",
    "each",
    "filter",
    "reject",
    "flat_map",
    "find",
    "any?",
    "all?",
    "group_by",
    "sort_by",
  }
)


def _enum_callback(call: n.RemoteCall, functions) -> Optional[Tuple[int, n.Fn]]:
  """Returns the position and value of the trailing function literal of an ``Enum`` call."""
  if not isinstance(call.module, n.ModuleRef) or call.module.name != "Enum":
    return None
  if call.function not in functions or not call.args:
    return None
  last = call.args[-1]
  if isinstance(last, n.Fn) and len(last.clauses) == 1:
    return len(call.args) - 1, last
  return None


def _replace_callback(call: n.RemoteCall, position: int, callback: n.Fn) -> n.RemoteCall:
  args = list(call.args)
  args[position] = callback
  return call.with_changes(args=tuple(args))


def _is_self_append(stmt: n.Node, name: str) -> bool:
  """Recognizes ``name = name ++ [element]``."""
  if not (isinstance(stmt, n.Match) and isinstance(stmt.pattern, p.PVar) and stmt.pattern.name == name):
    return False
  value = stmt.value
  return (
    isinstance(value, n.BinaryOp)
    and value.op == "++"
    and isinstance(value.left, n.Var)
    and value.left.name == name
    and isinstance(value.right, n.ListLit)
    and len(value.right.elements) == 1
  )


def _is_copy_of(stmt: n.Node, source: str) -> Optional[str]:
  """Returns the target of ``target = source``, or None."""
  if (
    isinstance(stmt, n.Match)
    and isinstance(stmt.pattern, p.PVar)
    and isinstance(stmt.value, n.Var)
    and stmt.value.name == source
    and stmt.pattern.name != source
  ):
    return stmt.pattern.name
  return None


def unify_accumulator_alias(clause: n.Clause) -> Optional[n.Clause]:
  """
  Replaces a self-appending accumulator alias with the accumulator binder.

  Args:
      clause: The single clause of a fold callback (``fn elem, acc -> ... end``).

  Returns:
      Optional[n.Clause]: The rewritten clause, or None when the shape does not apply.
  """
  if len(clause.patterns) != 2 or not isinstance(clause.patterns[1], p.PVar):
    return None
  acc = clause.patterns[1].name
  statements = list(n.as_statements(clause.body))
  head_names = set()
  for pattern in clause.patterns:
    head_names.update(pattern_binders(pattern))

  for index, stmt in enumerate(statements):
    alias = _is_copy_of(stmt, acc)
    if alias is None or alias in head_names:
      continue
    rest = statements[index + 1 :]
    appends = [s for s in rest if _is_self_append(s, alias)]
    if not appends:
      continue
    others = statements[:index] + [s for s in rest if not _is_self_append(s, alias)]
    if any(alias in collect_bound_names(s) for s in others):
      continue
    if any(acc in collect_bound_names(s) for s in statements):
      continue
    if is_referenced(rest, 0, acc) or is_referenced(statements[:index], 0, alias):
      continue
    if clause.guard is not None and references(clause.guard, alias):
      continue

    canonical = undecorated(acc)
    mapping: Dict[str, str] = {alias: canonical}
    patterns = clause.patterns
    if canonical != acc:
      if canonical in collect_names(clause):
        continue
      patterns = (patterns[0], patterns[1].with_changes(name=canonical))
      mapping[acc] = canonical
    if not all(renamable(old, clause) for old in mapping):
      continue
    body_statements = [rename_names(s, mapping) for s in statements[:index] + rest]
    body = _rebuild_body(clause.body, body_statements)
    return clause.with_changes(patterns=patterns, body=body)
  return None


def _rebuild_body(body: n.Node, statements: List[n.Node]) -> n.Node:
  if isinstance(body, n.Block):
    return body.with_changes(statements=tuple(statements))
  if len(statements) == 1:
    return statements[0]
  return n.Block(tuple(statements), pos=body.pos)


def eliminate_element_copy(body: n.Node, element: str, head_names) -> Optional[n.Node]:
  """
  Removes ``copy = element`` from a callback or comprehension body.

  Args:
      body: The body in which the element binder is visible.
      element: The element binder name.
      head_names: Every name bound by the owning head.

  Returns:
      Optional[n.Node]: The rewritten body, or None when nothing applies.
  """
  statements = list(n.as_statements(body))
  if any(element in collect_bound_names(s) for s in statements):
    return None
  for index, stmt in enumerate(statements):
    copy = _is_copy_of(stmt, element)
    if copy is None or copy in head_names:
      continue
    rest = statements[index + 1 :]
    if any(copy in collect_bound_names(s) for s in rest):
      continue
    if is_referenced(statements[:index], 0, copy) or not renamable(copy, *rest):
      continue
    if rest:
      new_statements = statements[:index] + [substitute_reads(s, {copy: element}) for s in rest]
    else:
      new_statements = statements[:index] + [stmt.value]
    return _rebuild_body(body, new_statements)
  return None


class ReduceAliasTransformer(PassTransformer):
  """
  Unifies fold-callback accumulator aliases with the accumulator binder.
  """

  def leave_RemoteCall(self, original: n.RemoteCall, updated: n.RemoteCall) -> n.Node:
    found = _enum_callback(updated, FOLD_FUNCTIONS)
    if found is None:
      return updated
    position, callback = found
    clause = callback.clauses[0]
    current = clause
    while True:
      rewritten = unify_accumulator_alias(current)
      if rewritten is None:
        break
      self.record()
      current = rewritten
    if current is clause:
      return updated
    return _replace_callback(updated, position, callback.with_changes(clauses=(current,)))


class ReduceAccumulatorAliasPass(TransformerPass):
  """
  Substitutes the canonical accumulator for self-appending aliases.
  """

  name = "reduce_accumulator_alias"
  family = PassFamily.ALIAS_UNIFICATION
  transformer_class = ReduceAliasTransformer


class ElementCopyTransformer(PassTransformer):
  """
  Eliminates plain copies of element binders.
  """

  def _clean(self, body: n.Node, elements: List[str], head_names: Set[str]) -> n.Node:
    current = body
    progress = True
    while progress:
      progress = False
      for element in elements:
        rewritten = eliminate_element_copy(current, element, head_names)
        if rewritten is not None:
          self.record()
          current = rewritten
          progress = True
    return current

  def _clean_clause(self, clause: n.Clause) -> n.Clause:
    if clause.guard is not None or not clause.patterns or not isinstance(clause.patterns[0], p.PVar):
      return clause
    head_names: Set[str] = set()
    for pattern in clause.patterns:
      head_names.update(pattern_binders(pattern))
    body = self._clean(clause.body, [clause.patterns[0].name], head_names)
    return clause.with_changes(body=body)

  def leave_Fn(self, original: n.Fn, updated: n.Fn) -> n.Node:
    # Callbacks flagged by the loop lowering, wherever they are passed.
    if len(updated.clauses) != 1 or not updated.clauses[0].patterns:
      return updated
    head = updated.clauses[0].patterns[0]
    if head.meta.role is not NodeRole.REDUCE_ELEMENT:
      return updated
    clause = self._clean_clause(updated.clauses[0])
    if clause is updated.clauses[0]:
      return updated
    return updated.with_changes(clauses=(clause,))

  def leave_RemoteCall(self, original: n.RemoteCall, updated: n.RemoteCall) -> n.Node:
    found = _enum_callback(updated, ELEMENT_CALLBACK_FUNCTIONS)
    if found is None:
      return updated
    position, callback = found
    clause = self._clean_clause(callback.clauses[0])
    if clause is callback.clauses[0]:
      return updated
    return _replace_callback(updated, position, callback.with_changes(clauses=(clause,)))

  def leave_For(self, original: n.For, updated: n.For) -> n.Node:
    head_names: Set[str] = set()
    for generator in updated.generators:
      head_names.update(pattern_binders(generator.pattern))
    elements = [g.pattern.name for g in updated.generators if isinstance(g.pattern, p.PVar)]
    body = self._clean(updated.body, elements, head_names)
    if body is updated.body:
      return updated
    return updated.with_changes(body=body)


class ElementCopyEliminationPass(TransformerPass):
  """
  Substitutes element binders for their local copies.
  """

  name = "element_copy_elimination"
  family = PassFamily.ALIAS_UNIFICATION
  transformer_class = ElementCopyTransformer
