"""
Runtime Configuration Store.

Project-wide settings consulted by a few passes (the project name used to
qualify framework aliases, the reserved names that must never be discarded,
the naming conventions of compiler temporaries). The configuration is
resolved once per engine and never mutated afterwards.
"""

import re
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Pattern, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator

from idiomizer.errors import ConfigError
from idiomizer.utils.console import log_error, log_info, log_warning

if sys.version_info >= (3, 11):
  import tomllib
else:
  import tomli as tomllib

DEFAULT_RESERVED_NAMES = [
  "assigns",
  "socket",
  "conn",
  "params",
  "session",
  "__MODULE__",
  "__ENV__",
  "__CALLER__",
  "__DIR__",
  "__STACKTRACE__",
]

DEFAULT_TEMP_NAME_PATTERNS = [
  r"^_?g\d*$",
  r"^_?this\d+$",
  r"^tmp\d*$",
  r"^temp_[a-z0-9_]+$",
  r"^_?hx_tmp\w*$",
]

DEFAULT_RENAME_PREFERENCES = ["value", "item", "entry", "elem", "current", "result"]

DEFAULT_QUALIFIED_ALIASES = ["Repo", "PubSub", "Presence", "Endpoint", "Gettext"]

DEFAULT_PRESERVED_NAMES = [
  "utf8",
  "utf16",
  "utf32",
  "md5",
  "sha1",
  "sha256",
  "sha512",
  "base64",
  "int8",
  "int16",
  "int32",
  "int64",
  "float32",
  "float64",
  "x1",
  "x2",
  "y1",
  "y2",
]


@lru_cache(maxsize=None)
def compile_patterns(patterns: Tuple[str, ...]) -> Tuple[Pattern, ...]:
  """
  Compiles a tuple of regular expressions once.

  Args:
      patterns: Regex sources.

  Returns:
      Tuple[Pattern, ...]: The compiled expressions.
  """
  return tuple(re.compile(p) for p in patterns)


class RuntimeConfig(BaseModel):
  """
  Global configuration container for the normalization engine.
  """

  project_name: Optional[str] = Field(
    None,
    description="Application module prefix (e.g. 'TodoApp') used to qualify bare framework aliases.",
  )
  reserved_names: List[str] = Field(
    default_factory=lambda: list(DEFAULT_RESERVED_NAMES),
    description="Environment names that are never rewritten to discard binders.",
  )
  temp_name_patterns: List[str] = Field(
    default_factory=lambda: list(DEFAULT_TEMP_NAME_PATTERNS),
    description="Regexes recognising compiler temporaries when no metadata flag is carried.",
  )
  rename_preferences: List[str] = Field(
    default_factory=lambda: list(DEFAULT_RENAME_PREFERENCES),
    description="Descriptive names tried, in order, when a de-suffixed name collides.",
  )
  qualified_aliases: List[str] = Field(
    default_factory=lambda: list(DEFAULT_QUALIFIED_ALIASES),
    description="Bare module aliases qualified with the project name.",
  )
  preserved_names: List[str] = Field(
    default_factory=lambda: list(DEFAULT_PRESERVED_NAMES),
    description="Names whose numeric suffix is meaningful and never stripped.",
  )
  trace_mutations: bool = Field(False, description="Record before/after renderings for every changing pass.")

  @field_validator("temp_name_patterns")
  @classmethod
  def validate_patterns(cls, v: List[str]) -> List[str]:
    """
    Ensures every temporary-name pattern is a valid regular expression.

    Args:
        v (List[str]): The regex sources.

    Returns:
        List[str]: The unchanged list.

    Raises:
        ValueError: If a pattern does not compile.
    """
    for pattern in v:
      try:
        re.compile(pattern)
      except re.error as e:
        raise ValueError(f"Invalid temp_name_patterns entry '{pattern}': {e}")
    return v

  @field_validator("project_name")
  @classmethod
  def validate_project_name(cls, v: Optional[str]) -> Optional[str]:
    """
    Normalizes an empty project name to None and rejects non-module names.

    Args:
        v (Optional[str]): The configured name.

    Returns:
        Optional[str]: The stripped name or None.

    Raises:
        ValueError: If the name is not a valid module alias.
    """
    if v is None:
      return None
    v_clean = v.strip()
    if not v_clean:
      return None
    if not re.fullmatch(r"[A-Z][A-Za-z0-9_]*(\.[A-Z][A-Za-z0-9_]*)*", v_clean):
      raise ValueError(f"project_name must be a module alias, got '{v_clean}'")
    return v_clean

  @property
  def temp_regexes(self) -> Tuple[Pattern, ...]:
    """
    Compiled temporary-name patterns.

    Returns:
        Tuple[Pattern, ...]: One compiled regex per configured pattern.
    """
    return compile_patterns(tuple(self.temp_name_patterns))

  def with_project(self, project_name: Optional[str]) -> "RuntimeConfig":
    """
    Returns a validated copy with a different project name.

    Args:
        project_name (Optional[str]): The new project name.

    Returns:
        RuntimeConfig: The updated configuration.

    Raises:
        ConfigError: If the name is not a valid module alias.
    """
    data = self.model_dump()
    data["project_name"] = project_name
    try:
      return type(self).model_validate(data)
    except ValidationError as e:
      raise ConfigError(f"Configuration validation failed: {e}")

  @classmethod
  def load(
    cls,
    project_name: Optional[str] = None,
    reserved_names: Optional[List[str]] = None,
    trace_mutations: Optional[bool] = None,
    search_path: Optional[Path] = None,
  ) -> "RuntimeConfig":
    """
    Loads configuration from pyproject.toml and overrides with explicit arguments.

    Args:
        project_name (Optional[str]): Override for the project name.
        reserved_names (Optional[List[str]]): Override for the reserved names.
        trace_mutations (Optional[bool]): Override for mutation tracing.
        search_path (Optional[Path]): Directory to start searching for TOML config.

    Returns:
        RuntimeConfig: The fully resolved configuration object.

    Raises:
        ConfigError: If the merged settings fail validation.
    """
    start_dir = search_path or Path.cwd()
    toml_config = _load_toml_settings(start_dir)

    unknown = sorted(set(toml_config) - set(cls.model_fields))
    if unknown:
      log_warning(f"Ignoring unknown tool.idiomizer settings: {', '.join(unknown)}")

    merged: Dict[str, Any] = {k: v for k, v in toml_config.items() if k not in unknown}
    if project_name is not None:
      merged["project_name"] = project_name
    if reserved_names is not None:
      merged["reserved_names"] = reserved_names
    if trace_mutations is not None:
      merged["trace_mutations"] = trace_mutations

    try:
      return cls.model_validate(merged)
    except ValidationError as e:
      raise ConfigError(f"Configuration validation failed: {e}")


def _load_toml_settings(start_path: Path) -> Dict[str, Any]:
  """
  Searches parents for 'pyproject.toml' and extracts the ``[tool.idiomizer]`` table.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Dict[str, Any]: The settings table, empty when no file or table exists.

  Raises:
      ConfigError: If the first pyproject.toml found cannot be parsed.
  """
  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except tomllib.TOMLDecodeError as e:
        log_error(f"Cannot parse {toml_path}: {e}")
        raise ConfigError(f"Cannot parse {toml_path}: {e}")
      log_info(f"Loaded settings from {toml_path}")
      return dict(data.get("tool", {}).get("idiomizer", {}))

  return {}
