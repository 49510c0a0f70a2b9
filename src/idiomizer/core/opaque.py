"""
Token-boundary routines for opaque text fragments.

``Raw`` and ``Template`` nodes are the unstructured escape hatch of the tree.
Every analysis and every rename that has to look inside them goes through the
functions below, so all passes agree on what counts as a use.

An identifier is a maximal run of ASCII letters, digits and underscores. A name
occurs in a text only where neither neighbouring character extends the run.
The check is conservative: text inside string literals or comments of the
fragment still counts as a use.

Renaming is held to the opposite standard. ``is_renamable`` only accepts a
fragment whose every occurrence is a plain variable, so fields, atoms,
keyword keys, string contents and template markup are never rewritten.
"""

import re
from typing import FrozenSet, Iterator

_IDENT_CHAR = re.compile(r"[A-Za-z0-9_]")
_IDENT_RUN = re.compile(r"[A-Za-z0-9_]+")
_ASSIGNS_ACCESS = re.compile(r"@[A-Za-z_]")


def _extends(ch: str) -> bool:
  return bool(_IDENT_CHAR.match(ch))


def contains_identifier(text: str, name: str) -> bool:
  """
  Checks whether ``name`` occurs in ``text`` as a whole identifier.

  Args:
      text: The opaque fragment.
      name: The identifier to search for.

  Returns:
      bool: True if an occurrence is found that is not part of a longer run.
  """
  if not name:
    return False
  start = text.find(name)
  while start != -1:
    end = start + len(name)
    before_ok = start == 0 or not _extends(text[start - 1])
    after_ok = end == len(text) or not _extends(text[end])
    if before_ok and after_ok:
      return True
    start = text.find(name, start + 1)
  return False


def identifier_tokens(text: str) -> FrozenSet[str]:
  """
  Returns every maximal identifier run of ``text``.

  For names made only of identifier characters,
  ``name in identifier_tokens(text)`` equals ``contains_identifier(text, name)``.

  Args:
      text: The opaque fragment.

  Returns:
      FrozenSet[str]: The identifier runs.
  """
  return frozenset(_IDENT_RUN.findall(text))


def is_plain_identifier(name: str) -> bool:
  """
  Checks whether ``name`` is made only of identifier characters.

  Args:
      name: Candidate name.

  Returns:
      bool: True if the name is a single identifier run.
  """
  return bool(name) and _IDENT_RUN.fullmatch(name) is not None


def replace_identifier(text: str, old: str, new: str) -> str:
  """
  Replaces whole-identifier occurrences of ``old`` by ``new``.

  Args:
      text: The opaque fragment.
      old: Identifier to replace.
      new: Replacement identifier.

  Returns:
      str: The rewritten text (the same object when nothing matched).
  """
  if not old or not contains_identifier(text, old):
    return text
  pieces = []
  cursor = 0
  start = text.find(old)
  while start != -1:
    end = start + len(old)
    before_ok = start == 0 or not _extends(text[start - 1])
    after_ok = end == len(text) or not _extends(text[end])
    if before_ok and after_ok:
      pieces.append(text[cursor:start])
      pieces.append(new)
      cursor = end
      start = text.find(old, end)
    else:
      start = text.find(old, start + 1)
  pieces.append(text[cursor:])
  return "".join(pieces)


def uses_assigns(content: str) -> bool:
  """
  Checks whether template content reads fields through ``@field``.

  Args:
      content: Template text.

  Returns:
      bool: True if the template accesses its assigns.
  """
  return _ASSIGNS_ACCESS.search(content) is not None


# Characters before an occurrence that make it something other than a variable:
# ``@field`` assigns access, ``:atom`` and ``.field`` access.
_NON_VARIABLE_PREFIXES = ("@", ":", ".")

# Expression regions of a template: ``<%= expr %>``, ``<% code %>`` and ``{expr}``.
_TEMPLATE_EXPRESSION = re.compile(r"<%[=-]?(.*?)%>|\{([^{}]*)\}", re.DOTALL)


def _occurrences(text: str, name: str) -> Iterator[int]:
  start = text.find(name)
  while start != -1:
    end = start + len(name)
    before_ok = start == 0 or not _extends(text[start - 1])
    after_ok = end == len(text) or not _extends(text[end])
    if before_ok and after_ok:
      yield start
    start = text.find(name, start + 1)


def _inside_string(text: str, index: int) -> bool:
  quote = None
  escaped = False
  for ch in text[:index]:
    if escaped:
      escaped = False
    elif ch == "\\":
      escaped = True
    elif quote is None and ch in "\"'":
      quote = ch
    elif ch == quote:
      quote = None
  return quote is not None


def _variable_occurrences_only(code: str, name: str) -> bool:
  for start in _occurrences(code, name):
    end = start + len(name)
    if start > 0 and code[start - 1] in _NON_VARIABLE_PREFIXES:
      return False
    # ``name: value`` is a keyword key; ``name::type`` is a segment binder.
    if code[end : end + 1] == ":" and code[end : end + 2] != "::":
      return False
    if _inside_string(code, start):
      return False
  return True


def is_renamable(text: str, name: str, template: bool = False) -> bool:
  """
  Checks whether every occurrence of ``name`` is a plain variable use.

  Occurrences after ``@``, ``:`` or ``.``, keyword keys and occurrences inside
  quoted strings may denote a field, an atom or literal text, which a rename
  cannot tell apart from a variable. In template content, text outside
  ``<% %>`` tags and ``{}`` interpolations is literal markup.

  Args:
      text: The opaque fragment.
      name: The identifier a pass wants to rename.
      template: Whether ``text`` is template content.

  Returns:
      bool: True when renaming every whole-identifier occurrence is safe.
  """
  if not contains_identifier(text, name):
    return True
  if not template:
    return _variable_occurrences_only(text, name)
  covered = 0
  for match in _TEMPLATE_EXPRESSION.finditer(text):
    code = match.group(1) if match.group(1) is not None else match.group(2)
    occurrences = sum(1 for _ in _occurrences(code, name))
    if occurrences and not _variable_occurrences_only(code, name):
      return False
    covered += occurrences
  return covered == sum(1 for _ in _occurrences(text, name))
