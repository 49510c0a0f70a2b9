"""
Scope/Usage Analyzer.

Answers the question every discarding or renaming pass needs before it acts:
"is this name read at or after this point of the statement list?"

A *read* is any ``Var`` reference, any pinned pattern (``^name``), and any
whole-identifier occurrence inside an opaque fragment. The names introduced by
a pattern (``PVar``, ``PAlias``) are binders and never count as reads, while
expressions embedded in a pattern (map keys, literal values, segment sizes)
do.

The analysis is deliberately conservative. It does not model shadowing, so a
read of an inner rebinding also counts as a read of the outer one. A false
positive keeps a binding alive that could have been discarded; a false
negative would let a pass discard or rename a live binding, which is never
acceptable.

Two implementations are provided and must agree on every input:

1.  ``is_referenced`` walks the statements directly.
2.  ``UsageIndex`` precomputes, per statement, the set of names read so many
    candidate names can be queried against one statement list cheaply.
"""

from bisect import bisect_left
from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, List, Sequence, Set

from idiomizer.core import nodes as n
from idiomizer.core import patterns as p
from idiomizer.core.base import TreeItem
from idiomizer.core.opaque import contains_identifier, identifier_tokens, is_plain_identifier, uses_assigns
from idiomizer.core.transformer import iter_children, walk

ASSIGNS = "assigns"

# How each shape participates in reads. Every member of NODE_TYPES and
# PATTERN_TYPES has an entry; "structural" shapes only read through children.
READ = "read"
PIN = "pin"
OPAQUE = "opaque"
BINDER = "binder"
STRUCTURAL = "structural"

READ_ROLES: Dict[type, str] = {t: STRUCTURAL for t in n.NODE_TYPES + p.PATTERN_TYPES}
READ_ROLES.update(
  {
    n.Var: READ,
    p.PPin: PIN,
    n.Raw: OPAQUE,
    n.Template: OPAQUE,
    p.PVar: BINDER,
    p.PAlias: BINDER,
  }
)


def _opaque_text(item: TreeItem) -> str:
  if isinstance(item, n.Raw):
    return item.code
  return item.content


def _opaque_reads(item: TreeItem, name: str) -> bool:
  if contains_identifier(_opaque_text(item), name):
    return True
  return name == ASSIGNS and isinstance(item, n.Template) and uses_assigns(item.content)


def references(item: TreeItem, name: str) -> bool:
  """
  Checks whether ``name`` is read anywhere inside ``item``.

  Args:
      item: Subtree to scan (node or pattern).
      name: Variable name.

  Returns:
      bool: True if any read of ``name`` occurs in the subtree.
  """
  role = READ_ROLES.get(type(item), STRUCTURAL)
  if role == READ:
    return item.name == name
  if role == PIN:
    return item.name == name
  if role == OPAQUE:
    return _opaque_reads(item, name)
  return any(references(child, name) for child in iter_children(item))


def is_referenced(statements: Sequence[n.Node], from_index: int, name: str) -> bool:
  """
  Checks whether ``name`` is read in any statement at or after ``from_index``.

  Left-hand binders are never reads; right-hand sides, guards, branches,
  clause bodies, function-literal bodies, comprehension bodies and opaque
  fragments are all scanned.

  Args:
      statements: The statement list (one flat scope).
      from_index: First statement position to scan.
      name: Variable name.

  Returns:
      bool: True if a read is found.
  """
  for stmt in statements[max(from_index, 0) :]:
    if references(stmt, name):
      return True
  return False


def collect_reads(item: TreeItem) -> Set[str]:
  """
  Collects every name read inside ``item``.

  Opaque fragments contribute all of their identifier tokens (and ``assigns``
  for templates using ``@field``).

  Args:
      item: Subtree to scan.

  Returns:
      Set[str]: Names read.
  """
  reads: Set[str] = set()
  for sub in walk(item):
    role = READ_ROLES.get(type(sub), STRUCTURAL)
    if role in (READ, PIN):
      reads.add(sub.name)
    elif role == OPAQUE:
      reads.update(identifier_tokens(_opaque_text(sub)))
      if isinstance(sub, n.Template) and uses_assigns(sub.content):
        reads.add(ASSIGNS)
  return reads


def pattern_binders(pattern: p.Pattern) -> List[str]:
  """
  Lists the names a pattern binds, in order, with repetitions.

  Args:
      pattern: The binder pattern.

  Returns:
      List[str]: Bound names (pinned names excluded).
  """
  names: List[str] = []
  for sub in walk(pattern):
    if isinstance(sub, (p.PVar, p.PAlias)):
      names.append(sub.name)
  return names


def collect_bound_names(item: TreeItem) -> Set[str]:
  """
  Collects every name bound by any pattern anywhere inside ``item``.

  Args:
      item: Subtree to scan.

  Returns:
      Set[str]: Bound names, from all nested scopes.
  """
  return {sub.name for sub in walk(item) if isinstance(sub, (p.PVar, p.PAlias))}


def collect_possible_binders(item: TreeItem) -> Set[str]:
  """
  Bound names plus every identifier an opaque fragment inside ``item`` might bind.

  Args:
      item: Subtree to scan.

  Returns:
      Set[str]: Names that may be bound somewhere inside ``item``.
  """
  names = collect_bound_names(item)
  for sub in walk(item):
    if isinstance(sub, n.OPAQUE_TYPES):
      names |= identifier_tokens(_opaque_text(sub))
  return names


def collect_names(item: TreeItem) -> Set[str]:
  """
  Collects every name read or bound inside ``item``.

  Args:
      item: Subtree to scan.

  Returns:
      Set[str]: The union of reads and binders.
  """
  return collect_reads(item) | collect_bound_names(item)


# Constructs whose bodies do not leak bindings into the enclosing statement list.
_SCOPED = (
  n.Cond,
  n.CondClause,
  n.Clause,
  n.Fn,
  n.For,
  n.With,
  n.Try,
  n.Receive,
  n.Def,
  n.Module,
)


def leaking_binders(item: n.Node) -> Set[str]:
  """
  Names a statement makes visible to the statements that follow it.

  Matches bind; bare blocks and parentheses leak their statements' bindings;
  the condition of an ``if`` and the subject of a ``case`` leak, their
  branches do not. Opaque fragments conservatively leak every identifier they
  contain.

  Args:
      item: A statement.

  Returns:
      Set[str]: Possibly-leaking binder names.
  """
  if isinstance(item, n.Match):
    return set(pattern_binders(item.pattern)) | leaking_binders(item.value)
  if isinstance(item, (n.If, n.Unless)):
    return leaking_binders(item.cond)
  if isinstance(item, n.Case):
    return leaking_binders(item.subject)
  if isinstance(item, _SCOPED):
    return set()
  if isinstance(item, n.OPAQUE_TYPES):
    return set(identifier_tokens(_opaque_text(item)))
  names: Set[str] = set()
  for child in iter_children(item):
    if isinstance(child, n.Node):
      names |= leaking_binders(child)
  return names


class UsageIndex:
  """
  Precomputed read index over one statement list.

  Equivalent to calling ``is_referenced`` on the same statements, but each
  query costs a dictionary lookup and a bisection instead of a tree walk.
  """

  def __init__(self, statements: Sequence[n.Node]) -> None:
    """
    Builds the index.

    Args:
        statements: The statement list to index.
    """
    self._count = len(statements)
    self._positions: Dict[str, List[int]] = defaultdict(list)
    self._opaque_by_stmt: Dict[int, List[TreeItem]] = {}

    for index, stmt in enumerate(statements):
      opaque: List[TreeItem] = []
      for name in self._structured_reads(stmt, opaque):
        self._positions[name].append(index)
      if opaque:
        self._opaque_by_stmt[index] = opaque
        tokens: Set[str] = set()
        for frag in opaque:
          tokens |= identifier_tokens(_opaque_text(frag))
          if isinstance(frag, n.Template) and uses_assigns(frag.content):
            tokens.add(ASSIGNS)
        for name in tokens:
          positions = self._positions[name]
          if not positions or positions[-1] != index:
            positions.append(index)

  @staticmethod
  def _structured_reads(stmt: n.Node, opaque: List[TreeItem]) -> FrozenSet[str]:
    reads: Set[str] = set()
    for sub in walk(stmt):
      role = READ_ROLES.get(type(sub), STRUCTURAL)
      if role in (READ, PIN):
        reads.add(sub.name)
      elif role == OPAQUE:
        opaque.append(sub)
    return frozenset(reads)

  def __len__(self) -> int:
    return self._count

  def is_referenced(self, from_index: int, name: str) -> bool:
    """
    Checks whether ``name`` is read at or after ``from_index``.

    Args:
        from_index: First statement position to consider.
        name: Variable name.

    Returns:
        bool: Same answer as ``is_referenced(statements, from_index, name)``.
    """
    start = max(from_index, 0)
    positions = self._positions.get(name)
    if positions and bisect_left(positions, start) < len(positions):
      return True
    if is_plain_identifier(name):
      return False
    # Names with non-identifier characters are not captured by tokenization.
    for index, frags in self._opaque_by_stmt.items():
      if index >= start and any(_opaque_reads(frag, name) for frag in frags):
        return True
    return False


def any_referenced(items: Iterable[TreeItem], name: str) -> bool:
  """
  Checks whether ``name`` is read in any of ``items``.

  Args:
      items: Subtrees to scan.
      name: Variable name.

  Returns:
      bool: True if any subtree reads ``name``.
  """
  return any(references(item, name) for item in items if item is not None)
