"""
Binder Hygiene Passes.

Names chosen by code generation rarely match what a person would write. These
passes adjust binder names without changing what any read resolves to:

1.  **Loop name restore**: binders of loop callbacks and comprehension
    generators that carry ``loop_origin_name`` metadata get their original
    iteration name back when it is free.
2.  **Discard promotion**: ``_x = expr`` followed by reads of ``x`` (and none
    of ``_x``) is rewritten to ``x = expr``, likewise for clause-head binders.
3.  **Unused binder marking**: clause-head binders and binders nested in
    block-level destructuring that are never read get the ``_`` marker.
4.  **Parameter discard**: unreferenced function parameters get the ``_``
    marker. Templates that access ``@field`` read ``assigns``, so an
    ``assigns`` parameter used that way is kept.
"""

from collections import Counter
from typing import Dict, Iterable, Optional, Set

from idiomizer.analysis.usage import (
  any_referenced,
  collect_names,
  is_referenced,
  pattern_binders,
  references,
)
from idiomizer.core import nodes as n
from idiomizer.core import patterns as p
from idiomizer.core.names import KEYWORDS, decorated, is_discard, is_reserved, is_wildcard, undecorated
from idiomizer.core.rewriter.base import PassTransformer, TransformerPass
from idiomizer.core.rewriter.renaming import renamable, rename_names
from idiomizer.core.transformer import transform
from idiomizer.enums import PassFamily


def rename_binders(pattern: p.Pattern, mapping: Dict[str, str]) -> p.Pattern:
  """
  Renames binders (never pins) inside a pattern.

  Args:
      pattern: The pattern to rewrite.
      mapping: Old binder name to new binder name.

  Returns:
      p.Pattern: The rewritten pattern.
  """
  if not mapping:
    return pattern

  def visit(item):
    if isinstance(item, (p.PVar, p.PAlias)) and item.name in mapping:
      return item.with_changes(name=mapping[item.name])
    return item

  return transform(pattern, visit)


def _unused_binders(
  patterns: Iterable[p.Pattern], scope: Iterable[Optional[n.Node]], config, skip_reserved: bool = True
) -> Dict[str, str]:
  """
  Computes the discard renames for binders of ``patterns`` unread in ``scope``.

  A binder qualifies when it occurs once in the patterns, is neither a
  wildcard nor already discarded, and neither it nor its discarded form is
  read in the scope or inside the patterns themselves.
  """
  patterns = tuple(patterns)
  scope = tuple(s for s in scope if s is not None)
  counts: Counter = Counter()
  for pattern in patterns:
    counts.update(pattern_binders(pattern))
  mapping: Dict[str, str] = {}
  for name, count in counts.items():
    if count != 1 or is_wildcard(name) or is_discard(name) or name.startswith("__"):
      continue
    if skip_reserved and is_reserved(name, config):
      continue
    target = decorated(name)
    if target in counts:
      continue
    if any_referenced(scope + patterns, name) or any_referenced(scope, target):
      continue
    mapping[name] = target
  return mapping


class LoopNameTransformer(PassTransformer):
  """
  Restores iteration names recorded by the loop lowering.
  """

  def _restore(self, pvar: p.PVar, taken: Set[str]) -> Optional[str]:
    origin = pvar.meta.loop_origin_name
    if not origin or origin == pvar.name or origin in taken:
      return None
    if origin in KEYWORDS or is_reserved(origin, self.config) or not origin.isidentifier():
      return None
    return origin

  def leave_Fn(self, original: n.Fn, updated: n.Fn) -> n.Node:
    clauses = []
    changed = False
    for clause in updated.clauses:
      taken = collect_names(clause)
      mapping: Dict[str, str] = {}
      for pattern in clause.patterns:
        if isinstance(pattern, p.PVar):
          origin = self._restore(pattern, taken | set(mapping.values()))
          if origin is not None and renamable(pattern.name, clause):
            mapping[pattern.name] = origin
      if mapping:
        self.record(len(mapping))
        clause = rename_names(clause, mapping)
        changed = True
      clauses.append(clause)
    if not changed:
      return updated
    return updated.with_changes(clauses=tuple(clauses))

  def leave_For(self, original: n.For, updated: n.For) -> n.Node:
    taken = collect_names(updated)
    mapping: Dict[str, str] = {}
    for index, generator in enumerate(updated.generators):
      pattern = generator.pattern
      if not isinstance(pattern, p.PVar):
        continue
      # The enumerable of the binding generator (and earlier ones) resolves outside.
      if any(references(g.enumerable, pattern.name) for g in updated.generators[: index + 1]):
        continue
      if updated.into is not None and references(updated.into, pattern.name):
        continue
      origin = self._restore(pattern, taken | set(mapping.values()))
      if origin is not None and renamable(pattern.name, updated):
        mapping[pattern.name] = origin
    if not mapping:
      return updated
    self.record(len(mapping))
    return rename_names(updated, mapping)


class LoopNameRestorePass(TransformerPass):
  """
  Renames loop binders back to their recorded source names.
  """

  name = "loop_name_restore"
  family = PassFamily.BINDER_HYGIENE
  transformer_class = LoopNameTransformer


class DiscardPromotionTransformer(PassTransformer):
  """
  Promotes discard-marked binders that are read under their plain name.
  """

  def _promotable(self, name: str) -> Optional[str]:
    if not is_discard(name):
      return None
    plain = undecorated(name)
    if plain in KEYWORDS or not plain.isidentifier() or plain in self.unit_binders():
      return None
    return plain

  def leave_Block(self, original: n.Block, updated: n.Block) -> n.Node:
    if not self.is_flat_scope(original):
      return updated
    statements = list(updated.statements)
    changed = False
    for index, stmt in enumerate(statements):
      if not isinstance(stmt, n.Match) or not isinstance(stmt.pattern, p.PVar):
        continue
      plain = self._promotable(stmt.pattern.name)
      if plain is None:
        continue
      if not is_referenced(statements, index + 1, plain):
        continue
      if is_referenced(statements, index + 1, stmt.pattern.name) or references(stmt.value, plain):
        continue
      statements[index] = stmt.with_changes(pattern=stmt.pattern.with_changes(name=plain))
      self.record()
      changed = True
    if not changed:
      return updated
    return updated.with_changes(statements=tuple(statements))

  def leave_Clause(self, original: n.Clause, updated: n.Clause) -> n.Node:
    scope = tuple(s for s in (updated.guard, updated.body) if s is not None)
    counts: Counter = Counter()
    for pattern in updated.patterns:
      counts.update(pattern_binders(pattern))
    mapping: Dict[str, str] = {}
    for name, count in counts.items():
      plain = self._promotable(name)
      if plain is None or count != 1 or plain in counts:
        continue
      if any_referenced(scope, plain) and not any_referenced(scope, name):
        mapping[name] = plain
    if not mapping:
      return updated
    self.record(len(mapping))
    return updated.with_changes(patterns=tuple(rename_binders(pattern, mapping) for pattern in updated.patterns))


class DiscardPromotionPass(TransformerPass):
  """
  Drops the discard marker from binders whose plain name is read.
  """

  name = "discard_promotion"
  family = PassFamily.BINDER_HYGIENE
  transformer_class = DiscardPromotionTransformer


class UnusedBinderTransformer(PassTransformer):
  """
  Adds the discard marker to unread clause and destructuring binders.
  """

  def leave_Clause(self, original: n.Clause, updated: n.Clause) -> n.Node:
    mapping = _unused_binders(updated.patterns, (updated.guard, updated.body), self.config)
    if not mapping:
      return updated
    self.record(len(mapping))
    return updated.with_changes(patterns=tuple(rename_binders(pattern, mapping) for pattern in updated.patterns))

  def leave_Block(self, original: n.Block, updated: n.Block) -> n.Node:
    if not self.is_flat_scope(original):
      return updated
    statements = list(updated.statements)
    changed = False
    for index, stmt in enumerate(statements):
      if not isinstance(stmt, n.Match) or isinstance(stmt.pattern, (p.PVar, p.PWildcard)):
        continue
      mapping = _unused_binders((stmt.pattern,), statements[index + 1 :], self.config)
      if not mapping:
        continue
      statements[index] = stmt.with_changes(pattern=rename_binders(stmt.pattern, mapping))
      self.record(len(mapping))
      changed = True
    if not changed:
      return updated
    return updated.with_changes(statements=tuple(statements))


class UnusedBinderMarkPass(TransformerPass):
  """
  Marks never-read clause-head and destructuring binders as discarded.
  """

  name = "unused_binder_mark"
  family = PassFamily.BINDER_HYGIENE
  transformer_class = UnusedBinderTransformer


class ParameterDiscardTransformer(PassTransformer):
  """
  Adds the discard marker to unreferenced function parameters.
  """

  def leave_Def(self, original: n.Def, updated: n.Def) -> n.Node:
    mapping = _unused_binders(updated.params, (updated.guard, updated.body), self.config, skip_reserved=False)
    if not mapping:
      return updated
    self.record(len(mapping))
    return updated.with_changes(params=tuple(rename_binders(param, mapping) for param in updated.params))


class ParameterDiscardPass(TransformerPass):
  """
  Renames unreferenced function parameters to discard form.
  """

  name = "parameter_discard"
  family = PassFamily.BINDER_HYGIENE
  transformer_class = ParameterDiscardTransformer
