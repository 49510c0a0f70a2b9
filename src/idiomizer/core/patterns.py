"""
Pattern Sub-language.

Patterns appear on the left-hand side of ``Match`` nodes, in clause heads, in
function parameters and in comprehension generators. Every name inside a
pattern introduces a new binding unless it is wrapped in ``PPin``, which
asserts equality against an existing binding instead.

Expressions embedded in patterns (literal values, map keys, binary segment
sizes) are ordinary nodes and are reads, not binders.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple

from idiomizer.core.base import TreeItem

if TYPE_CHECKING:
  from idiomizer.core.nodes import Node


@dataclass(frozen=True)
class Pattern(TreeItem):
  """Base class of the closed set of pattern shapes."""

  def __init_subclass__(cls, **kwargs) -> None:
    super().__init_subclass__(**kwargs)
    if cls.__module__ != __name__:
      raise TypeError(f"Pattern shapes are a closed set; cannot add {cls.__name__} outside {__name__}")


@dataclass(frozen=True)
class PVar(Pattern):
  """Binds ``name`` to the matched value."""

  name: str


@dataclass(frozen=True)
class PWildcard(Pattern):
  """Matches anything without binding (``_``)."""

  pass


@dataclass(frozen=True)
class PLiteral(Pattern):
  """Matches a literal value exactly."""

  value: "Node"


@dataclass(frozen=True)
class PTuple(Pattern):
  """Matches a tuple element-wise."""

  elements: Tuple[Pattern, ...]


@dataclass(frozen=True)
class PList(Pattern):
  """Matches a proper list of fixed length."""

  elements: Tuple[Pattern, ...]


@dataclass(frozen=True)
class PCons(Pattern):
  """Matches ``[head1, head2 | tail]``."""

  heads: Tuple[Pattern, ...]
  tail: Pattern


@dataclass(frozen=True)
class PMap(Pattern):
  """Matches a map containing at least the given keys."""

  pairs: Tuple[Tuple["Node", Pattern], ...]


@dataclass(frozen=True)
class PStruct(Pattern):
  """Matches a tagged record (struct) of ``module`` with the given fields."""

  module: str
  fields: Tuple[Tuple[str, Pattern], ...] = ()


@dataclass(frozen=True)
class PPin(Pattern):
  """Asserts equality against the existing binding ``name`` (``^name``)."""

  name: str


@dataclass(frozen=True)
class PAlias(Pattern):
  """Matches ``pattern`` and also binds the whole value to ``name`` (``pattern = name``)."""

  pattern: Pattern
  name: str


@dataclass(frozen=True)
class PSegment(Pattern):
  """One segment of a binary pattern (``pattern::spec-size(n)``)."""

  pattern: Pattern
  spec: str = ""
  size: Optional["Node"] = None


@dataclass(frozen=True)
class PBinary(Pattern):
  """Matches a bitstring segment by segment."""

  segments: Tuple[PSegment, ...]


PATTERN_TYPES = (
  PVar,
  PWildcard,
  PLiteral,
  PTuple,
  PList,
  PCons,
  PMap,
  PStruct,
  PPin,
  PAlias,
  PSegment,
  PBinary,
)
