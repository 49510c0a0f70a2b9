"""
Intermediate Tree Nodes.

Defines the closed set of expression/statement shapes of the intermediate tree
handed over by the tree builder. Nodes are immutable values: a pass produces a
new tree, sharing every subtree it did not touch.

The set of shapes is closed. ``NODE_TYPES`` enumerates it and every component
that dispatches on shape (the debug printer, the usage analyzer) carries one
arm per entry; the test-suite asserts that coverage, so adding a shape forces
every dispatcher to acknowledge it.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from idiomizer.core.base import TreeItem
from idiomizer.core.patterns import Pattern


@dataclass(frozen=True)
class Node(TreeItem):
  """Base class of the closed set of node shapes."""

  def __init_subclass__(cls, **kwargs) -> None:
    super().__init_subclass__(**kwargs)
    if cls.__module__ != __name__:
      raise TypeError(f"Node shapes are a closed set; cannot add {cls.__name__} outside {__name__}")


# --- Literals ---


@dataclass(frozen=True)
class Atom(Node):
  """Symbolic constant (``:ok``)."""

  value: str


@dataclass(frozen=True)
class Str(Node):
  """String literal without interpolation."""

  value: str


@dataclass(frozen=True)
class Int(Node):
  value: int


@dataclass(frozen=True)
class Float(Node):
  value: float


@dataclass(frozen=True)
class Bool(Node):
  value: bool


@dataclass(frozen=True)
class Nil(Node):
  pass


# --- References ---


@dataclass(frozen=True)
class Var(Node):
  """Read of a local variable."""

  name: str


@dataclass(frozen=True)
class ModuleRef(Node):
  """Reference to a module by (dotted) name, e.g. ``Enum`` or ``MyApp.Repo``."""

  name: str


@dataclass(frozen=True)
class Attr(Node):
  """Read of a module attribute (``@name``)."""

  name: str


# --- Binding and sequencing ---


@dataclass(frozen=True)
class Match(Node):
  """Binder: matches ``value`` against ``pattern`` (``pattern = value``)."""

  pattern: Pattern
  value: Node


@dataclass(frozen=True)
class Block(Node):
  """
  Sequence of statements evaluated in order; its value is the last one.

  A block is a flat scope. Blocks that are the body of a clause, branch or
  function open a child scope; a bare block nested in another block does not.
  """

  statements: Tuple[Node, ...]


@dataclass(frozen=True)
class Paren(Node):
  """Explicit grouping parentheses."""

  expr: Node


# --- Branching and dispatch ---


@dataclass(frozen=True)
class If(Node):
  cond: Node
  then: Node
  else_: Optional[Node] = None


@dataclass(frozen=True)
class Unless(Node):
  cond: Node
  then: Node
  else_: Optional[Node] = None


@dataclass(frozen=True)
class CondClause(Node):
  """One ``condition -> body`` arm of a ``Cond``."""

  cond: Node
  body: Node


@dataclass(frozen=True)
class Cond(Node):
  clauses: Tuple[CondClause, ...]


@dataclass(frozen=True)
class Clause(Node):
  """
  One arm of a multi-clause dispatch: ``patterns when guard -> body``.

  Used by ``Case``, ``Fn``, ``Receive`` and the ``else``/``catch`` sections of
  ``With``/``Try``. Case and receive clauses have exactly one pattern.
  """

  patterns: Tuple[Pattern, ...]
  body: Node
  guard: Optional[Node] = None


@dataclass(frozen=True)
class Case(Node):
  subject: Node
  clauses: Tuple[Clause, ...]


@dataclass(frozen=True)
class WithClause(Node):
  """One ``pattern <- value`` step of a ``With``."""

  pattern: Pattern
  value: Node
  guard: Optional[Node] = None


@dataclass(frozen=True)
class With(Node):
  clauses: Tuple[WithClause, ...]
  body: Node
  else_clauses: Tuple[Clause, ...] = ()


@dataclass(frozen=True)
class Receive(Node):
  clauses: Tuple[Clause, ...]
  after_timeout: Optional[Node] = None
  after_body: Optional[Node] = None


@dataclass(frozen=True)
class RescueClause(Node):
  """``binder in [exceptions] -> body`` arm of a ``Try``."""

  exceptions: Tuple[Node, ...]
  body: Node
  binder: Optional[Pattern] = None


@dataclass(frozen=True)
class Try(Node):
  body: Node
  rescue_clauses: Tuple[RescueClause, ...] = ()
  catch_clauses: Tuple[Clause, ...] = ()
  else_clauses: Tuple[Clause, ...] = ()
  after: Optional[Node] = None


# --- Functions and calls ---


@dataclass(frozen=True)
class Fn(Node):
  """Function literal with one or more clauses."""

  clauses: Tuple[Clause, ...]


@dataclass(frozen=True)
class Capture(Node):
  """Capture operator (``&expr``), e.g. ``&String.upcase/1`` or ``&(&1 + 1)``."""

  expr: Node


@dataclass(frozen=True)
class CaptureArg(Node):
  """Positional capture argument (``&1``)."""

  index: int


@dataclass(frozen=True)
class Call(Node):
  """Local function call ``name(args)``."""

  name: str
  args: Tuple[Node, ...] = ()


@dataclass(frozen=True)
class RemoteCall(Node):
  """Remote call ``Module.function(args)``."""

  module: Node
  function: str
  args: Tuple[Node, ...] = ()


@dataclass(frozen=True)
class DynamicCall(Node):
  """Anonymous function invocation ``target.(args)``."""

  target: Node
  args: Tuple[Node, ...] = ()


@dataclass(frozen=True)
class Pipe(Node):
  """``left |> right``."""

  left: Node
  right: Node


@dataclass(frozen=True)
class BinaryOp(Node):
  op: str
  left: Node
  right: Node


@dataclass(frozen=True)
class UnaryOp(Node):
  op: str
  operand: Node


# --- Data construction ---


@dataclass(frozen=True)
class TupleLit(Node):
  elements: Tuple[Node, ...]


@dataclass(frozen=True)
class ListLit(Node):
  elements: Tuple[Node, ...]


@dataclass(frozen=True)
class ListCons(Node):
  """``[head1, head2 | tail]`` construction."""

  heads: Tuple[Node, ...]
  tail: Node


@dataclass(frozen=True)
class MapLit(Node):
  pairs: Tuple[Tuple[Node, Node], ...]


@dataclass(frozen=True)
class MapUpdate(Node):
  """``%{target | key => value}``."""

  target: Node
  pairs: Tuple[Tuple[Node, Node], ...]


@dataclass(frozen=True)
class StructLit(Node):
  """Tagged-record construction ``%Module{field: value}``."""

  module: str
  fields: Tuple[Tuple[str, Node], ...] = ()


@dataclass(frozen=True)
class StructUpdate(Node):
  """Tagged-record update ``%Module{target | field: value}``."""

  module: str
  target: Node
  fields: Tuple[Tuple[str, Node], ...]


@dataclass(frozen=True)
class KeywordList(Node):
  pairs: Tuple[Tuple[str, Node], ...]


@dataclass(frozen=True)
class Access(Node):
  """Dynamic access ``target[key]``."""

  target: Node
  key: Node


@dataclass(frozen=True)
class FieldAccess(Node):
  """Static field access ``target.name``."""

  target: Node
  name: str


@dataclass(frozen=True)
class Range(Node):
  first: Node
  last: Node
  step: Optional[Node] = None


@dataclass(frozen=True)
class Generator(Node):
  """``pattern <- enumerable`` inside a ``For`` comprehension."""

  pattern: Pattern
  enumerable: Node


@dataclass(frozen=True)
class For(Node):
  """Comprehension ``for generators, filters, into: into do body end``."""

  generators: Tuple[Generator, ...]
  body: Node
  filters: Tuple[Node, ...] = ()
  into: Optional[Node] = None


@dataclass(frozen=True)
class BinarySegment(Node):
  value: Node
  spec: str = ""


@dataclass(frozen=True)
class Bitstring(Node):
  segments: Tuple[BinarySegment, ...]


@dataclass(frozen=True)
class StringInterp(Node):
  """Interpolated string; ``Str`` parts are literal text, other parts are interpolated."""

  parts: Tuple[Node, ...]


@dataclass(frozen=True)
class Sigil(Node):
  letter: str
  content: str
  modifiers: str = ""


@dataclass(frozen=True)
class Raise(Node):
  exception: Node
  message: Optional[Node] = None


@dataclass(frozen=True)
class Throw(Node):
  value: Node


# --- Unstructured escape hatches ---


@dataclass(frozen=True)
class Raw(Node):
  """
  Opaque raw-text fragment emitted verbatim by the printer.

  This is the single unstructured escape hatch of the grammar. Analyses see it
  only through the token-boundary routines of ``idiomizer.core.opaque``.
  """

  code: str


@dataclass(frozen=True)
class Template(Node):
  """
  Templated-text fragment (``~H``-style markup).

  Treated like ``Raw`` by every analysis, plus an implicit read of the
  template assigns when the content uses ``@field`` access.
  """

  content: str
  sigil: str = "H"


# --- Definitions ---


@dataclass(frozen=True)
class Module(Node):
  name: str
  body: Tuple[Node, ...]


@dataclass(frozen=True)
class Def(Node):
  """Named function clause (``def``/``defp``)."""

  name: str
  params: Tuple[Pattern, ...]
  body: Node
  guard: Optional[Node] = None
  private: bool = False


@dataclass(frozen=True)
class ModuleAttribute(Node):
  """Module attribute definition ``@name value``."""

  name: str
  value: Node


@dataclass(frozen=True)
class Alias(Node):
  module: str
  as_: Optional[str] = None

  @property
  def local_name(self) -> str:
    """The name the alias makes available (last segment unless ``as`` is given)."""
    return self.as_ or self.module.split(".")[-1]


@dataclass(frozen=True)
class Import(Node):
  module: str
  only: Tuple[Tuple[str, int], ...] = ()


@dataclass(frozen=True)
class Use(Node):
  module: str
  opts: Optional[Node] = None


@dataclass(frozen=True)
class Require(Node):
  module: str


@dataclass(frozen=True)
class DefStruct(Node):
  fields: Tuple[Tuple[str, Node], ...]


NODE_TYPES = (
  Atom,
  Str,
  Int,
  Float,
  Bool,
  Nil,
  Var,
  ModuleRef,
  Attr,
  Match,
  Block,
  Paren,
  If,
  Unless,
  CondClause,
  Cond,
  Clause,
  Case,
  WithClause,
  With,
  Receive,
  RescueClause,
  Try,
  Fn,
  Capture,
  CaptureArg,
  Call,
  RemoteCall,
  DynamicCall,
  Pipe,
  BinaryOp,
  UnaryOp,
  TupleLit,
  ListLit,
  ListCons,
  MapLit,
  MapUpdate,
  StructLit,
  StructUpdate,
  KeywordList,
  Access,
  FieldAccess,
  Range,
  Generator,
  For,
  BinarySegment,
  Bitstring,
  StringInterp,
  Sigil,
  Raise,
  Throw,
  Raw,
  Template,
  Module,
  Def,
  ModuleAttribute,
  Alias,
  Import,
  Use,
  Require,
  DefStruct,
)

LITERAL_TYPES = (Atom, Str, Int, Float, Bool, Nil)

# Unstructured text fragments; only ever inspected through idiomizer.core.opaque.
OPAQUE_TYPES = (Raw, Template)


def is_literal(node: Node) -> bool:
  """
  Checks whether a node is a scalar literal.

  Args:
      node: The node to inspect.

  Returns:
      bool: True for atoms, strings, numbers, booleans and nil.
  """
  return isinstance(node, LITERAL_TYPES)


def literal_value(node: Node):
  """
  Returns the Python value of a scalar literal.

  Atoms are returned as ``("atom", name)`` so they never compare equal to
  strings.

  Args:
      node: A literal node.

  Returns:
      The comparable literal value.
  """
  if isinstance(node, Atom):
    return ("atom", node.value)
  if isinstance(node, Nil):
    return None
  return node.value


def as_statements(node: Optional[Node]) -> Tuple[Node, ...]:
  """
  Views a body as a statement sequence.

  Args:
      node: A body node, possibly a ``Block``.

  Returns:
      Tuple[Node, ...]: The block statements, a singleton for any other node,
      or an empty tuple for ``None``.
  """
  if node is None:
    return ()
  if isinstance(node, Block):
    return node.statements
  return (node,)
