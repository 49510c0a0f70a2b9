"""
Static Purity Analysis.

Decides, conservatively, whether evaluating an expression can have observable
side effects. Passes use it before they drop or move an expression; anything
not provably free of effects is treated as impure.

Treated as effectful:
1.  **Unknown calls**: local calls and remote calls outside the known-pure modules.
2.  **I/O and process operations**: ``IO``, ``File``, ``Logger``, ``send``, ``spawn``.
3.  **Callback-driven iteration**: ``Enum.each`` and friends.
4.  **Opaque fragments**: raw text and templates cannot be inspected.
5.  **Explicit control transfer**: ``raise`` and ``throw``.
"""

from typing import Set

from idiomizer.core import nodes as n
from idiomizer.core.base import TreeItem
from idiomizer.core.patterns import Pattern
from idiomizer.core.transformer import iter_children

_PURE_MODULES: Set[str] = {
  "Enum",
  "Map",
  "MapSet",
  "List",
  "Keyword",
  "String",
  "Tuple",
  "Integer",
  "Float",
  "Atom",
  "Kernel",
}

_EFFECTFUL_FUNCTIONS: Set[str] = {
  "each",
  "send",
  "spawn",
  "put_env",
  "run",
}

_PURE_LOCAL_FUNCTIONS: Set[str] = {
  "length",
  "hd",
  "tl",
  "elem",
  "is_nil",
  "is_list",
  "is_map",
  "is_atom",
  "is_binary",
  "is_integer",
  "is_float",
  "is_number",
  "is_tuple",
  "is_function",
  "is_boolean",
  "map_size",
  "tuple_size",
  "to_string",
  "abs",
  "max",
  "min",
  "div",
  "rem",
  "round",
  "trunc",
}

_ALWAYS_EFFECTFUL = (n.Raw, n.Template, n.Raise, n.Throw, n.Receive, n.DynamicCall)


def _pure_argument(arg: n.Node) -> bool:
  if isinstance(arg, n.Fn):
    return all(is_pure(clause) for clause in arg.clauses)
  return is_pure(arg)


def is_pure(item: TreeItem) -> bool:
  """
  Checks whether evaluating ``item`` is free of observable side effects.

  Creating a function literal is pure (its body only runs when called), but
  a function literal passed to a call is inspected like the call's other
  arguments.

  Args:
      item: Expression subtree.

  Returns:
      bool: True only when the expression is provably effect-free.
  """
  if isinstance(item, Pattern):
    return all(is_pure(child) for child in iter_children(item))
  if isinstance(item, _ALWAYS_EFFECTFUL):
    return False
  if isinstance(item, n.Fn):
    return True
  if isinstance(item, n.Call):
    return item.name in _PURE_LOCAL_FUNCTIONS and all(_pure_argument(a) for a in item.args)
  if isinstance(item, n.RemoteCall):
    if not isinstance(item.module, n.ModuleRef) or item.module.name not in _PURE_MODULES:
      return False
    if item.function in _EFFECTFUL_FUNCTIONS:
      return False
    return all(_pure_argument(a) for a in item.args)
  if isinstance(item, n.Pipe):
    return is_pure(item.left) and is_pure(item.right)
  return all(is_pure(child) for child in iter_children(item))
