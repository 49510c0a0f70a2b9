"""
Construction helpers for intermediate trees.

Terse constructors used by tests, documentation examples and tree builders.
Strings passed where a pattern is expected become ``PVar`` binders; Python
scalars passed where a node is expected become literals.
"""

from typing import Optional, Sequence, Union

from idiomizer.core import nodes as n
from idiomizer.core import patterns as p
from idiomizer.core.metadata import NodeMeta

NodeLike = Union[n.Node, int, float, str, bool, None]
PatternLike = Union[p.Pattern, str]


def lit(value: NodeLike) -> n.Node:
  """
  Wraps a Python scalar as a literal node (nodes pass through).

  Strings become ``Str`` literals; use ``atom`` or ``var`` for other meanings.
  """
  if isinstance(value, n.Node):
    return value
  if value is None:
    return n.Nil()
  if isinstance(value, bool):
    return n.Bool(value)
  if isinstance(value, int):
    return n.Int(value)
  if isinstance(value, float):
    return n.Float(value)
  if isinstance(value, str):
    return n.Str(value)
  raise TypeError(f"Cannot build a literal from {type(value).__name__}")


def atom(value: str) -> n.Atom:
  return n.Atom(value)


def var(name: str) -> n.Var:
  return n.Var(name)


def pvar(name: str, temp: Optional[bool] = None, loop_origin: Optional[str] = None) -> p.PVar:
  """
  Builds a variable binder, optionally flagged as a compiler temporary.

  Args:
      name: Binder name.
      temp: Value for the ``is_compiler_temp`` metadata flag.
      loop_origin: Value for the ``loop_origin_name`` metadata field.

  Returns:
      PVar: The binder.
  """
  if temp is None and loop_origin is None:
    return p.PVar(name)
  return p.PVar(name, meta=NodeMeta(is_compiler_temp=temp, loop_origin_name=loop_origin))


def pat(value: PatternLike) -> p.Pattern:
  """Coerces a name into a ``PVar`` (``"_"`` into ``PWildcard``); patterns pass through."""
  if isinstance(value, p.Pattern):
    return value
  if value == "_":
    return p.PWildcard()
  return p.PVar(value)


def plit(value: NodeLike) -> p.PLiteral:
  return p.PLiteral(lit(value))


def patom(value: str) -> p.PLiteral:
  return p.PLiteral(n.Atom(value))


def ptup(*elements: PatternLike) -> p.PTuple:
  return p.PTuple(tuple(pat(e) for e in elements))


def bind(target: PatternLike, value: NodeLike) -> n.Match:
  """Builds ``target = value``."""
  return n.Match(pat(target), lit(value))


def block(*statements: NodeLike) -> n.Block:
  return n.Block(tuple(lit(s) for s in statements))


def call(name: str, *args: NodeLike) -> n.Call:
  return n.Call(name, tuple(lit(a) for a in args))


def remote(module: str, function: str, *args: NodeLike) -> n.RemoteCall:
  return n.RemoteCall(n.ModuleRef(module), function, tuple(lit(a) for a in args))


def binop(op: str, left: NodeLike, right: NodeLike) -> n.BinaryOp:
  return n.BinaryOp(op, lit(left), lit(right))


def tup(*elements: NodeLike) -> n.TupleLit:
  return n.TupleLit(tuple(lit(e) for e in elements))


def lst(*elements: NodeLike) -> n.ListLit:
  return n.ListLit(tuple(lit(e) for e in elements))


def if_(cond: NodeLike, then: NodeLike, else_: NodeLike = None, has_else: bool = True) -> n.If:
  """Builds ``if cond do then else else_ end``; ``has_else=False`` omits the else branch."""
  return n.If(lit(cond), lit(then), lit(else_) if has_else else None)


def clause(patterns: Union[PatternLike, Sequence[PatternLike]], body: NodeLike, guard: NodeLike = None) -> n.Clause:
  """Builds a dispatch clause; a single pattern may be passed bare."""
  if isinstance(patterns, (p.Pattern, str)):
    patterns = [patterns]
  return n.Clause(tuple(pat(x) for x in patterns), lit(body), lit(guard) if guard is not None else None)


def case(subject: NodeLike, *clauses: n.Clause) -> n.Case:
  return n.Case(lit(subject), tuple(clauses))


def fn(params: Sequence[PatternLike], body: NodeLike) -> n.Fn:
  return n.Fn((clause(list(params), body),))


def defn(name: str, params: Sequence[PatternLike], body: NodeLike, private: bool = False) -> n.Def:
  return n.Def(name, tuple(pat(x) for x in params), lit(body), private=private)


def reduce(enumerable: NodeLike, init: NodeLike, elem: PatternLike, acc: PatternLike, body: NodeLike) -> n.RemoteCall:
  """Builds ``Enum.reduce(enumerable, init, fn elem, acc -> body end)``."""
  return remote("Enum", "reduce", enumerable, init, fn([elem, acc], body))


def raw(code: str) -> n.Raw:
  return n.Raw(code)
