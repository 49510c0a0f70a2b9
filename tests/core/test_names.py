"""
Tests for Naming Conventions.
"""

import pytest

from idiomizer.config import RuntimeConfig
from idiomizer.core.metadata import NodeMeta
from idiomizer.core.names import (
  decorated,
  first_free,
  is_compiler_temp,
  is_discard,
  is_reserved,
  is_wildcard,
  split_numeric_suffix,
  undecorated,
)


@pytest.mark.parametrize(
  "name, expected",
  [
    ("_x", True),
    ("_value", True),
    ("_", False),
    ("__MODULE__", False),
    ("x", False),
  ],
)
def test_is_discard(name, expected):
  assert is_discard(name) is expected


def test_decoration_round_trip():
  assert decorated("x") == "_x"
  assert decorated("_x") == "_x"
  assert undecorated("_x") == "x"
  assert undecorated("x") == "x"
  assert is_wildcard("_")
  assert not is_wildcard("_x")


@pytest.mark.parametrize(
  "name, expected",
  [
    ("item2", ("item", "2")),
    ("item_2", ("item", "2")),
    ("g2", ("g", "2")),
    ("tmp1", ("tmp", "1")),
    ("item22", ("item", "22")),
    ("x", None),
    ("_2", None),
    ("a1b", None),
    ("Item2", None),
  ],
)
def test_split_numeric_suffix(name, expected):
  assert split_numeric_suffix(name) == expected


def test_compiler_temp_flag_is_authoritative():
  config = RuntimeConfig()
  assert is_compiler_temp("tmp1", None, config)
  assert not is_compiler_temp("tmp1", NodeMeta(is_compiler_temp=False), config)
  assert is_compiler_temp("value", NodeMeta(is_compiler_temp=True), config)


def test_compiler_temp_name_fallback():
  config = RuntimeConfig()
  assert is_compiler_temp("g", NodeMeta(), config)
  assert is_compiler_temp("_g3", None, config)
  assert is_compiler_temp("_this3", None, config)
  assert is_compiler_temp("temp_result", None, config)
  assert not is_compiler_temp("value", None, config)
  assert not is_compiler_temp("gain", None, config)


def test_compiler_temp_patterns_are_configurable():
  config = RuntimeConfig(temp_name_patterns=[r"^__gen\d+$"])
  assert is_compiler_temp("__gen4", None, config)
  assert not is_compiler_temp("tmp1", None, config)


def test_is_reserved():
  config = RuntimeConfig()
  assert is_reserved("socket", config)
  assert is_reserved("__CUSTOM__", config)
  assert not is_reserved("value", config)


def test_first_free():
  assert first_free(["value", "item"], {"value"}) == "item"
  assert first_free(["value"], {"value"}) is None
