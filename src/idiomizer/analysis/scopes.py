"""
Scope structure helpers.

A statement list is a flat scope. The bodies of clauses, branches, function
literals, comprehensions and definitions open child scopes: names they bind do
not leak upward. A bare block nested directly inside another block (or inside
parentheses, or on the right-hand side of a match) is *not* a scope of its
own; its bindings stay visible to the statements that follow the enclosing
statement.

Block-local passes consult ``is_scope_body`` so that they never reason about a
leaking block as if its statement list were the whole scope.
"""

from idiomizer.core import nodes as n
from idiomizer.core.base import TreeItem

# Fields holding scope-opening bodies, per owner shape.
SCOPE_BODY_FIELDS = {
  n.Def: ("body",),
  n.Clause: ("body",),
  n.CondClause: ("body",),
  n.If: ("then", "else_"),
  n.Unless: ("then", "else_"),
  n.For: ("body",),
  n.With: ("body",),
  n.Try: ("body", "after"),
  n.RescueClause: ("body",),
  n.Receive: ("after_body",),
}


def is_scope_body(parent: TreeItem, child: TreeItem) -> bool:
  """
  Checks whether ``child`` is a scope-opening body of ``parent``.

  Identity is compared, so both arguments must come from the same (original)
  tree.

  Args:
      parent: The owning node, or None at the root.
      child: The candidate body.

  Returns:
      bool: True if ``child`` is a body whose bindings do not leak.
  """
  if parent is None:
    return False
  for field_name in SCOPE_BODY_FIELDS.get(type(parent), ()):
    if getattr(parent, field_name) is child:
      return True
  return False


def is_comprehension_body(parent: TreeItem, child: TreeItem) -> bool:
  """
  Checks whether ``child`` is the body of a ``For`` comprehension.

  Args:
      parent: The owning node.
      child: The candidate body.

  Returns:
      bool: True if ``child`` is ``parent.body`` of a comprehension.
  """
  return isinstance(parent, n.For) and parent.body is child

