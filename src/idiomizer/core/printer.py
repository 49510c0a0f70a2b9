"""
Debug Renderer.

Produces compact target-language-like text for a tree. It is used for trace
events, log messages and readable test assertions; production serialization is
owned by the printer collaborator downstream of the pipeline.

Dispatch is a table keyed by shape with one entry per member of
``NODE_TYPES`` and ``PATTERN_TYPES``.
"""

from typing import Callable, Dict

from idiomizer.core import nodes as n
from idiomizer.core import patterns as p
from idiomizer.core.base import TreeItem

INDENT = "  "


def render(item: TreeItem, indent: int = 0) -> str:
  """
  Renders a node or pattern as text.

  Args:
      item: The tree item.
      indent: Current indentation depth for multi-line constructs.

  Returns:
      str: The rendered text.
  """
  renderer = _RENDERERS.get(type(item))
  if renderer is None:
    return f"<{type(item).__name__}>"
  return renderer(item, indent)


def _r(item, indent: int = 0) -> str:
  return render(item, indent)


def _args(items, indent: int) -> str:
  return ", ".join(_r(i, indent) for i in items)


def _body(node: n.Node, indent: int) -> str:
  pad = INDENT * (indent + 1)
  return "\n".join(pad + _r(s, indent + 1) for s in n.as_statements(node))


def _block(node: n.Block, indent: int) -> str:
  if not node.statements:
    return "(\n)"
  pad = INDENT * (indent + 1)
  inner = "\n".join(pad + _r(s, indent + 1) for s in node.statements)
  return f"(\n{inner}\n{INDENT * indent})"


def _if(keyword: str):
  def render_if(node, indent: int) -> str:
    pad = INDENT * indent
    out = f"{keyword} {_r(node.cond, indent)} do\n{_body(node.then, indent)}\n"
    if node.else_ is not None:
      out += f"{pad}else\n{_body(node.else_, indent)}\n"
    return out + f"{pad}end"

  return render_if


def _clause(node: n.Clause, indent: int) -> str:
  head = _args(node.patterns, indent)
  if node.guard is not None:
    head += f" when {_r(node.guard, indent)}"
  stmts = n.as_statements(node.body)
  if len(stmts) == 1 and not isinstance(stmts[0], (n.Case, n.If, n.Cond, n.Fn, n.With, n.Try)):
    return f"{head} -> {_r(stmts[0], indent)}"
  return f"{head} ->\n{_body(node.body, indent)}"


def _clauses(clauses, indent: int) -> str:
  pad = INDENT * (indent + 1)
  return "\n".join(pad + _r(c, indent + 1) for c in clauses)


def _case(node: n.Case, indent: int) -> str:
  return f"case {_r(node.subject, indent)} do\n{_clauses(node.clauses, indent)}\n{INDENT * indent}end"


def _cond(node: n.Cond, indent: int) -> str:
  return f"cond do\n{_clauses(node.clauses, indent)}\n{INDENT * indent}end"


def _with(node: n.With, indent: int) -> str:
  steps = ", ".join(_r(c, indent) for c in node.clauses)
  out = f"with {steps} do\n{_body(node.body, indent)}\n"
  if node.else_clauses:
    out += f"{INDENT * indent}else\n{_clauses(node.else_clauses, indent)}\n"
  return out + f"{INDENT * indent}end"


def _receive(node: n.Receive, indent: int) -> str:
  out = f"receive do\n{_clauses(node.clauses, indent)}\n"
  if node.after_timeout is not None:
    after_body = node.after_body if node.after_body is not None else n.Nil()
    out += f"{INDENT * indent}after\n{INDENT * (indent + 1)}{_r(node.after_timeout, indent)} ->\n"
    out += f"{_body(after_body, indent + 1)}\n"
  return out + f"{INDENT * indent}end"


def _rescue(node: n.RescueClause, indent: int) -> str:
  head = _args(node.exceptions, indent)
  if node.binder is not None:
    head = f"{_r(node.binder, indent)} in [{head}]" if head else _r(node.binder, indent)
  return f"{head} ->\n{_body(node.body, indent)}"


def _try(node: n.Try, indent: int) -> str:
  pad = INDENT * indent
  out = f"try do\n{_body(node.body, indent)}\n"
  if node.rescue_clauses:
    out += f"{pad}rescue\n{_clauses(node.rescue_clauses, indent)}\n"
  if node.catch_clauses:
    out += f"{pad}catch\n{_clauses(node.catch_clauses, indent)}\n"
  if node.else_clauses:
    out += f"{pad}else\n{_clauses(node.else_clauses, indent)}\n"
  if node.after is not None:
    out += f"{pad}after\n{_body(node.after, indent)}\n"
  return out + f"{pad}end"


def _fn(node: n.Fn, indent: int) -> str:
  if len(node.clauses) == 1:
    return f"fn {_r(node.clauses[0], indent)} end"
  return f"fn\n{_clauses(node.clauses, indent)}\n{INDENT * indent}end"


def _for(node: n.For, indent: int) -> str:
  heads = [_r(g, indent) for g in node.generators] + [_r(f, indent) for f in node.filters]
  if node.into is not None:
    heads.append(f"into: {_r(node.into, indent)}")
  return f"for {', '.join(heads)} do\n{_body(node.body, indent)}\n{INDENT * indent}end"


def _pairs(pairs, indent: int) -> str:
  return ", ".join(f"{_r(k, indent)} => {_r(v, indent)}" for k, v in pairs)


def _kw(pairs, indent: int) -> str:
  return ", ".join(f"{k}: {_r(v, indent)}" for k, v in pairs)


def _interp(node: n.StringInterp, indent: int) -> str:
  out = []
  for part in node.parts:
    if isinstance(part, n.Str):
      out.append(part.value.replace('"', '\\"'))
    else:
      out.append("#{" + _r(part, indent) + "}")
  return '"' + "".join(out) + '"'


def _def(node: n.Def, indent: int) -> str:
  keyword = "defp" if node.private else "def"
  head = f"{keyword} {node.name}({_args(node.params, indent)})"
  if node.guard is not None:
    head += f" when {_r(node.guard, indent)}"
  return f"{head} do\n{_body(node.body, indent)}\n{INDENT * indent}end"


def _module(node: n.Module, indent: int) -> str:
  pad = INDENT * (indent + 1)
  inner = "\n".join(pad + _r(s, indent + 1) for s in node.body)
  return f"defmodule {node.name} do\n{inner}\n{INDENT * indent}end"


def _float(node: n.Float, indent: int) -> str:
  return repr(float(node.value))


def _pmap(node: p.PMap, indent: int) -> str:
  return "%{" + ", ".join(f"{_r(k, indent)} => {_r(v, indent)}" for k, v in node.pairs) + "}"


def _psegment(node: p.PSegment, indent: int) -> str:
  out = _r(node.pattern, indent)
  if node.spec:
    out += f"::{node.spec}"
  if node.size is not None:
    out += f"-size({_r(node.size, indent)})"
  return out


_RENDERERS: Dict[type, Callable[[TreeItem, int], str]] = {
  # Nodes
  n.Atom: lambda node, i: f":{node.value}",
  n.Str: lambda node, i: '"' + node.value.replace('"', '\\"') + '"',
  n.Int: lambda node, i: str(node.value),
  n.Float: _float,
  n.Bool: lambda node, i: "true" if node.value else "false",
  n.Nil: lambda node, i: "nil",
  n.Var: lambda node, i: node.name,
  n.ModuleRef: lambda node, i: node.name,
  n.Attr: lambda node, i: f"@{node.name}",
  n.Match: lambda node, i: f"{_r(node.pattern, i)} = {_r(node.value, i)}",
  n.Block: _block,
  n.Paren: lambda node, i: f"({_r(node.expr, i)})",
  n.If: _if("if"),
  n.Unless: _if("unless"),
  n.CondClause: lambda node, i: f"{_r(node.cond, i)} -> {_r(node.body, i)}",
  n.Cond: _cond,
  n.Clause: _clause,
  n.Case: _case,
  n.WithClause: lambda node, i: f"{_r(node.pattern, i)} <- {_r(node.value, i)}"
  + (f" when {_r(node.guard, i)}" if node.guard is not None else ""),
  n.With: _with,
  n.Receive: _receive,
  n.RescueClause: _rescue,
  n.Try: _try,
  n.Fn: _fn,
  n.Capture: lambda node, i: f"&{_r(node.expr, i)}",
  n.CaptureArg: lambda node, i: f"&{node.index}",
  n.Call: lambda node, i: f"{node.name}({_args(node.args, i)})",
  n.RemoteCall: lambda node, i: f"{_r(node.module, i)}.{node.function}({_args(node.args, i)})",
  n.DynamicCall: lambda node, i: f"{_r(node.target, i)}.({_args(node.args, i)})",
  n.Pipe: lambda node, i: f"{_r(node.left, i)} |> {_r(node.right, i)}",
  n.BinaryOp: lambda node, i: f"{_r(node.left, i)} {node.op} {_r(node.right, i)}",
  n.UnaryOp: lambda node, i: f"{node.op}{' ' if node.op.isalpha() else ''}{_r(node.operand, i)}",
  n.TupleLit: lambda node, i: "{" + _args(node.elements, i) + "}",
  n.ListLit: lambda node, i: "[" + _args(node.elements, i) + "]",
  n.ListCons: lambda node, i: f"[{_args(node.heads, i)} | {_r(node.tail, i)}]",
  n.MapLit: lambda node, i: "%{" + _pairs(node.pairs, i) + "}",
  n.MapUpdate: lambda node, i: "%{" + f"{_r(node.target, i)} | {_pairs(node.pairs, i)}" + "}",
  n.StructLit: lambda node, i: f"%{node.module}{{{_kw(node.fields, i)}}}",
  n.StructUpdate: lambda node, i: f"%{node.module}{{{_r(node.target, i)} | {_kw(node.fields, i)}}}",
  n.KeywordList: lambda node, i: "[" + _kw(node.pairs, i) + "]",
  n.Access: lambda node, i: f"{_r(node.target, i)}[{_r(node.key, i)}]",
  n.FieldAccess: lambda node, i: f"{_r(node.target, i)}.{node.name}",
  n.Range: lambda node, i: f"{_r(node.first, i)}..{_r(node.last, i)}"
  + (f"//{_r(node.step, i)}" if node.step is not None else ""),
  n.Generator: lambda node, i: f"{_r(node.pattern, i)} <- {_r(node.enumerable, i)}",
  n.For: _for,
  n.BinarySegment: lambda node, i: _r(node.value, i) + (f"::{node.spec}" if node.spec else ""),
  n.Bitstring: lambda node, i: "<<" + _args(node.segments, i) + ">>",
  n.StringInterp: _interp,
  n.Sigil: lambda node, i: f"~{node.letter}\"{node.content}\"{node.modifiers}",
  n.Raise: lambda node, i: f"raise {_r(node.exception, i)}"
  + (f", {_r(node.message, i)}" if node.message is not None else ""),
  n.Throw: lambda node, i: f"throw {_r(node.value, i)}",
  n.Raw: lambda node, i: node.code,
  n.Template: lambda node, i: f'~{node.sigil}"""\n{node.content}\n"""',
  n.Module: _module,
  n.Def: _def,
  n.ModuleAttribute: lambda node, i: f"@{node.name} {_r(node.value, i)}",
  n.Alias: lambda node, i: f"alias {node.module}" + (f", as: {node.as_}" if node.as_ else ""),
  n.Import: lambda node, i: f"import {node.module}"
  + (", only: [" + ", ".join(f"{f}: {a}" for f, a in node.only) + "]" if node.only else ""),
  n.Use: lambda node, i: f"use {node.module}" + (f", {_r(node.opts, i)}" if node.opts is not None else ""),
  n.Require: lambda node, i: f"require {node.module}",
  n.DefStruct: lambda node, i: f"defstruct [{_kw(node.fields, i)}]",
  # Patterns
  p.PVar: lambda node, i: node.name,
  p.PWildcard: lambda node, i: "_",
  p.PLiteral: lambda node, i: _r(node.value, i),
  p.PTuple: lambda node, i: "{" + _args(node.elements, i) + "}",
  p.PList: lambda node, i: "[" + _args(node.elements, i) + "]",
  p.PCons: lambda node, i: f"[{_args(node.heads, i)} | {_r(node.tail, i)}]",
  p.PMap: _pmap,
  p.PStruct: lambda node, i: f"%{node.module}{{{_kw(node.fields, i)}}}",
  p.PPin: lambda node, i: f"^{node.name}",
  p.PAlias: lambda node, i: f"{_r(node.pattern, i)} = {node.name}",
  p.PSegment: _psegment,
  p.PBinary: lambda node, i: "<<" + _args(node.segments, i) + ">>",
}
