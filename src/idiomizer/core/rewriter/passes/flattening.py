"""
Nested Dispatch Flattening.

Generated code often dispatches twice on one value::

    case result do
      {:ok, value} ->
        case value do
          %User{} = user -> user
          other -> other
        end
      {:error, reason} -> reason
    end

When an outer clause binds exactly one variable from a tagged tuple and its
whole body is a ``case`` over that variable, the inner clauses are lifted into
the outer ``case``, each combining the outer tag with the inner pattern::

    case result do
      {:ok, %User{} = user} -> user
      {:ok, other} -> other
      {:error, reason} -> reason
    end

A bare variable inner pattern replaces the outer binder (references to the
eliminated variable are renamed to it); any other inner pattern keeps the
outer name through an alias pattern when the inner clause still reads it.

Flattening is only performed when no value can fall through differently:
either the inner dispatch ends in an unguarded catch-all, or no later outer
clause can match a tuple carrying the same tag.
"""

from typing import List, Optional, Tuple

from idiomizer.analysis.usage import any_referenced, collect_bound_names, pattern_binders
from idiomizer.core import nodes as n
from idiomizer.core import patterns as p
from idiomizer.core.rewriter.base import PassTransformer, TransformerPass
from idiomizer.core.rewriter.passes.dispatch import is_catch_all
from idiomizer.core.rewriter.renaming import renamable, substitute_reads
from idiomizer.core.transformer import walk
from idiomizer.enums import PassFamily


def _tag_and_slot(pattern: p.Pattern) -> Optional[Tuple[n.Atom, int]]:
  """
  Recognizes ``{:tag, ..., var, ...}`` with exactly one variable binder.

  Returns:
      The tag atom and the index of the variable element, or None.
  """
  if not isinstance(pattern, p.PTuple) or len(pattern.elements) < 2:
    return None
  head = pattern.elements[0]
  if not isinstance(head, p.PLiteral) or not isinstance(head.value, n.Atom):
    return None
  slot = None
  for index, element in enumerate(pattern.elements[1:], start=1):
    if isinstance(element, p.PVar):
      if slot is not None:
        return None
      slot = index
    elif not isinstance(element, (p.PWildcard, p.PLiteral)):
      return None
  if slot is None:
    return None
  return head.value, slot


def _inner_case(clause: n.Clause, name: str) -> Optional[n.Case]:
  statements = n.as_statements(clause.body)
  if len(statements) != 1:
    return None
  body = statements[0]
  if isinstance(body, n.Case) and isinstance(body.subject, n.Var) and body.subject.name == name:
    return body
  return None


def _may_match_tag(pattern: p.Pattern, tag: n.Atom, arity: int) -> bool:
  """Conservatively checks whether ``pattern`` could match a tuple ``{tag, ...}`` of ``arity``."""
  if isinstance(pattern, p.PAlias):
    return _may_match_tag(pattern.pattern, tag, arity)
  if isinstance(pattern, p.PTuple):
    if len(pattern.elements) != arity:
      return False
    head = pattern.elements[0]
    if isinstance(head, p.PLiteral) and isinstance(head.value, n.Atom):
      return head.value.value == tag.value
    return True
  if isinstance(pattern, (p.PList, p.PCons, p.PMap, p.PStruct, p.PBinary)):
    return False
  if isinstance(pattern, p.PLiteral):
    return False
  return True


def _pins(pattern: p.Pattern, name: str) -> bool:
  return any(isinstance(sub, p.PPin) and sub.name == name for sub in walk(pattern))


class CaseFlatteningTransformer(PassTransformer):
  """
  Lifts inner dispatch clauses into the enclosing dispatch.
  """

  def _merge(self, outer: n.Clause, inner: n.Case, slot: int, name: str) -> Optional[List[n.Clause]]:
    tuple_pattern = outer.patterns[0]
    merged: List[n.Clause] = []
    for clause in inner.clauses:
      if len(clause.patterns) != 1:
        return None
      inner_pattern = clause.patterns[0]
      if _pins(inner_pattern, name):
        return None
      reads_outer = any_referenced((clause.guard, clause.body), name)
      body, guard = clause.body, clause.guard

      if isinstance(inner_pattern, p.PVar):
        replacement: p.Pattern = inner_pattern
        new_name = inner_pattern.name
        if reads_outer and new_name != name:
          rebound = collect_bound_names(clause.body)
          if clause.guard is not None:
            rebound |= collect_bound_names(clause.guard)
          if name in rebound or new_name in rebound or not renamable(name, clause.body, clause.guard):
            return None
          body = substitute_reads(body, {name: new_name})
          guard = substitute_reads(guard, {name: new_name}) if guard is not None else None
      elif isinstance(inner_pattern, p.PWildcard):
        replacement = tuple_pattern.elements[slot] if reads_outer else inner_pattern
      else:
        if name in pattern_binders(inner_pattern):
          return None
        replacement = p.PAlias(inner_pattern, name) if reads_outer else inner_pattern

      elements = list(tuple_pattern.elements)
      elements[slot] = replacement
      merged.append(
        clause.with_changes(
          patterns=(tuple_pattern.with_changes(elements=tuple(elements)),),
          body=body,
          guard=guard,
        )
      )
    return merged

  def _flatten_once(self, case: n.Case) -> Optional[n.Case]:
    clauses = case.clauses
    for index, outer in enumerate(clauses):
      if outer.guard is not None or len(outer.patterns) != 1:
        continue
      shape = _tag_and_slot(outer.patterns[0])
      if shape is None:
        continue
      tag, slot = shape
      name = outer.patterns[0].elements[slot].name
      inner = _inner_case(outer, name)
      if inner is None or not inner.clauses:
        continue
      arity = len(outer.patterns[0].elements)
      exhaustive = is_catch_all(inner.clauses[-1])
      if not exhaustive and any(_may_match_tag(c.patterns[0], tag, arity) for c in clauses[index + 1 :] if c.patterns):
        continue
      merged = self._merge(outer, inner, slot, name)
      if merged is None:
        continue
      return case.with_changes(clauses=clauses[:index] + tuple(merged) + clauses[index + 1 :])
    return None

  def leave_Case(self, original: n.Case, updated: n.Case) -> n.Node:
    current = updated
    while True:
      flattened = self._flatten_once(current)
      if flattened is None:
        return current
      self.record()
      current = flattened


class NestedCaseFlatteningPass(TransformerPass):
  """
  Merges a clause whose body re-dispatches on its payload into the outer dispatch.
  """

  name = "nested_case_flattening"
  family = PassFamily.DISPATCH
  transformer_class = CaseFlatteningTransformer
