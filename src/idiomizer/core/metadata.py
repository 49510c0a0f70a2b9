"""
Node Metadata and Source Positions.

Every node and pattern carries a ``NodeMeta`` bag and an optional
``SourcePos``. Metadata is written once by whichever stage computed it (usually
the tree builder) and is read-only afterwards.

The bag is a typed model with a fixed set of optional fields rather than an
open dictionary: constructing it with an unknown field name raises, so a
misspelt key cannot silently turn a pass into a no-op.
"""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from idiomizer.enums import NodeRole

META_SCHEMA_VERSION = 1


class NodeMeta(BaseModel):
  """
  Optional auxiliary data attached to a node.

  All fields default to ``None`` (absent). Passes must tolerate absence and fall
  back to structural or naming heuristics.
  """

  model_config = ConfigDict(frozen=True, extra="forbid")

  version: int = Field(META_SCHEMA_VERSION, description="Schema version of this metadata bag.")
  source_file: Optional[str] = Field(None, description="Path of the original source file of the definition.")
  is_compiler_temp: Optional[bool] = Field(
    None,
    description="True if the binder was introduced by an upstream generation stage.",
  )
  loop_origin_name: Optional[str] = Field(
    None,
    description="Human-meaningful iteration name the binder stood for in the original program.",
  )
  role: Optional[NodeRole] = Field(None, description="Structural role recorded by the builder.")
  generated_by: Optional[str] = Field(None, description="Name of the stage that synthesized the node.")

  @property
  def is_empty(self) -> bool:
    """
    Checks whether no optional field is set.

    Returns:
        bool: True if every optional field is absent.
    """
    return not self.model_dump(exclude={"version"}, exclude_none=True)


EMPTY_META = NodeMeta()


@dataclass(frozen=True)
class SourcePos:
  """
  Position of a node in the original program.

  Attributes:
      file (str): Original source file.
      line (int): 1-based line number.
      column (int): 1-based column number, 0 when unknown.
  """

  file: str
  line: int
  column: int = 0

  def __str__(self) -> str:
    if self.column:
      return f"{self.file}:{self.line}:{self.column}"
    return f"{self.file}:{self.line}"
