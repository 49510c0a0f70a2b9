"""
Naming conventions of the target language.

Centralizes the discard marker (leading underscore), detection of compiler
temporaries, and numeric-suffix handling so every pass classifies names the
same way.
"""

import re
from typing import Iterable, Optional, Tuple

from idiomizer.config import RuntimeConfig
from idiomizer.core.metadata import NodeMeta

DISCARD_PREFIX = "_"

KEYWORDS = frozenset(
  {
    "do",
    "end",
    "fn",
    "when",
    "and",
    "or",
    "not",
    "in",
    "true",
    "false",
    "nil",
    "catch",
    "rescue",
    "after",
    "else",
  }
)

_NUMERIC_SUFFIX = re.compile(r"^([a-z_](?:[A-Za-z0-9_]*[A-Za-z])?)_?(\d+)$")


def is_wildcard(name: str) -> bool:
  """Checks for the bare ``_`` wildcard name."""
  return name == "_"


def is_discard(name: str) -> bool:
  """
  Checks whether a name carries the discard marker.

  ``_`` alone and double-underscore environment names (``__MODULE__``) are
  not discard-marked names.

  Args:
      name: Variable name.

  Returns:
      bool: True for names like ``_value``.
  """
  return name.startswith(DISCARD_PREFIX) and not name.startswith("__") and len(name) > 1


def undecorated(name: str) -> str:
  """
  Strips the discard marker.

  Args:
      name: Possibly discard-marked name.

  Returns:
      str: The name without its leading underscore.
  """
  return name[len(DISCARD_PREFIX) :] if is_discard(name) else name


def decorated(name: str) -> str:
  """
  Adds the discard marker.

  Args:
      name: Plain name.

  Returns:
      str: ``_name``; already-decorated names are returned unchanged.
  """
  return name if is_discard(name) else f"{DISCARD_PREFIX}{name}"


def is_reserved(name: str, config: RuntimeConfig) -> bool:
  """
  Checks whether a name is a reserved environment name.

  Args:
      name: Variable name.
      config: Runtime configuration providing the reserved list.

  Returns:
      bool: True if passes must not discard or rename it.
  """
  return name in config.reserved_names or (name.startswith("__") and name.endswith("__"))


def is_compiler_temp(name: str, meta: Optional[NodeMeta], config: RuntimeConfig) -> bool:
  """
  Decides whether a binder is a compiler temporary.

  The ``is_compiler_temp`` metadata flag is authoritative when present; the
  configured naming conventions are the fallback for trees that lack it.

  Args:
      name: Binder name.
      meta: Metadata of the binder, if any.
      config: Runtime configuration providing the naming conventions.

  Returns:
      bool: True if the binder was introduced by code generation.
  """
  if meta is not None and meta.is_compiler_temp is not None:
    return meta.is_compiler_temp
  return any(regex.match(name) for regex in config.temp_regexes)


def split_numeric_suffix(name: str) -> Optional[Tuple[str, str]]:
  """
  Splits ``item2`` into ``("item", "2")`` and ``item_2`` into ``("item", "2")``.

  Args:
      name: Candidate name.

  Returns:
      Optional[Tuple[str, str]]: Base and digits, or None when the name has no
      purely numeric suffix.
  """
  m = _NUMERIC_SUFFIX.match(name)
  if not m or m.group(1) == "_":
    return None
  return m.group(1), m.group(2)


def first_free(candidates: Iterable[str], taken: Iterable[str]) -> Optional[str]:
  """
  Picks the first candidate not in ``taken``.

  Args:
      candidates: Names in preference order.
      taken: Names already in use.

  Returns:
      Optional[str]: The first free candidate, or None.
  """
  used = set(taken)
  for candidate in candidates:
    if candidate not in used:
      return candidate
  return None
