"""
Hypothesis Strategies for Intermediate Trees.

Generates small, grammatically valid trees for property tests of the usage
analyzer and the rewrite passes. The trees are not meant to be evaluable:
names are drawn from a small shared pool so that reads, rebinds, discard
markers, compiler temporaries and numeric suffixes collide often.

1.  **Leaves**: literals, variable reads and opaque fragments whose text
    mentions pool names (and near-misses such as ``acc_total``).
2.  **Patterns**: variables, wildcards, literals, pins, tuples, lists and
    alias patterns.
3.  **Expressions**: recursive combinations of operators, calls, data
    literals, branches, dispatch, function literals and parenthesized blocks.
4.  **Statements**: matches and bare expressions, assembled into statement
    lists, blocks and function definitions.
"""

import hypothesis.strategies as st

from idiomizer.core import nodes as n
from idiomizer.core import patterns as p

NAMES = ("a", "b", "c", "x", "y", "acc", "_a", "_x", "tmp1", "g2")

RAW_SNIPPETS = (
  "IO.puts(a)",
  "x + 1",
  "acc_total",
  "send(self(), {:b, y})",
  "tmp1",
  "Logger.info(inspect(g2))",
)

TEMPLATE_SNIPPETS = (
  "<p><%= @a %></p>",
  "<span>{x}</span>",
  "<div>static</div>",
)

names = st.sampled_from(NAMES)

literals = st.one_of(
  st.integers(min_value=-3, max_value=3).map(n.Int),
  st.sampled_from(("ok", "error", "cont")).map(n.Atom),
  st.sampled_from(("", "s")).map(n.Str),
  st.booleans().map(n.Bool),
  st.just(n.Nil()),
)

variables = names.map(n.Var)

opaque_fragments = st.one_of(
  st.sampled_from(RAW_SNIPPETS).map(n.Raw),
  st.sampled_from(TEMPLATE_SNIPPETS).map(n.Template),
)

leaves = st.one_of(literals, variables, variables, opaque_fragments)


def _pattern_children(children: st.SearchStrategy) -> st.SearchStrategy:
  return st.one_of(
    st.lists(children, min_size=1, max_size=3).map(lambda elements: p.PTuple(tuple(elements))),
    st.lists(children, max_size=2).map(lambda elements: p.PList(tuple(elements))),
    st.builds(p.PAlias, children, names),
  )


patterns = st.recursive(
  st.one_of(
    names.map(p.PVar),
    names.map(p.PVar),
    st.just(p.PWildcard()),
    literals.map(p.PLiteral),
    names.map(p.PPin),
  ),
  _pattern_children,
  max_leaves=4,
)

binders = st.one_of(names.map(p.PVar), names.map(p.PVar), names.map(p.PVar), patterns)


def _clauses(children: st.SearchStrategy, arity: int = 1) -> st.SearchStrategy:
  clause = st.builds(
    n.Clause,
    st.lists(patterns, min_size=arity, max_size=arity).map(tuple),
    children,
    st.one_of(st.none(), children),
  )
  return st.lists(clause, min_size=1, max_size=3).map(tuple)


def _expression_children(children: st.SearchStrategy) -> st.SearchStrategy:
  statement = st.one_of(children, st.builds(n.Match, binders, children))
  return st.one_of(
    st.builds(n.BinaryOp, st.sampled_from(("+", "==", "++", "and")), children, children),
    st.builds(n.Call, st.sampled_from(("max", "compute", "length")), st.lists(children, max_size=2).map(tuple)),
    st.builds(
      n.RemoteCall,
      st.just(n.ModuleRef("Enum")),
      st.sampled_from(("map", "reduce", "each")),
      st.lists(children, max_size=2).map(tuple),
    ),
    st.lists(children, max_size=3).map(lambda elements: n.TupleLit(tuple(elements))),
    st.lists(children, max_size=3).map(lambda elements: n.ListLit(tuple(elements))),
    st.builds(n.If, children, children, st.one_of(st.none(), children)),
    st.builds(n.Case, children, _clauses(children)),
    st.builds(n.Fn, _clauses(children, arity=2)),
    st.lists(statement, max_size=3).map(lambda stmts: n.Paren(n.Block(tuple(stmts)))),
    st.lists(statement, max_size=3).map(lambda stmts: n.Block(tuple(stmts))),
    st.builds(n.Match, binders, children),
  )


expressions = st.recursive(leaves, _expression_children, max_leaves=10)

statements = st.one_of(
  st.builds(n.Match, binders, expressions),
  st.builds(n.Match, names.map(p.PVar), expressions),
  expressions,
)

statement_lists = st.lists(statements, min_size=1, max_size=6)

blocks = statement_lists.map(lambda stmts: n.Block(tuple(stmts)))

definitions = st.builds(
  n.Def,
  st.sampled_from(("run", "handle", "build")),
  st.lists(st.one_of(names.map(p.PVar), patterns), max_size=3).map(tuple),
  blocks,
)
