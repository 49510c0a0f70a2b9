"""
Numeric-Suffix Renaming.

Hygienic renaming upstream produces ``g2``, ``item_1`` and friends. Within one
function definition, a bound name with a purely numeric suffix is renamed to
its base form when the base is not already used (read or bound) anywhere in
the definition. When the base is taken, the first unused descriptive name
from the configured preference list is chosen instead; when none is free the
name is left alone.

Names whose suffix is meaningful (``utf8``, ``sha256``, ``x1``) are listed in
the configuration and never touched. Every occurrence is renamed, including
occurrences inside opaque fragments; a name an opaque fragment also uses as
a field, atom or literal text is left alone.
"""

from typing import Dict, Optional, Set

from idiomizer.analysis.usage import collect_bound_names, collect_names
from idiomizer.core import nodes as n
from idiomizer.core.names import KEYWORDS, first_free, is_discard, is_reserved, is_wildcard, split_numeric_suffix
from idiomizer.core.rewriter.base import PassTransformer, TransformerPass
from idiomizer.core.rewriter.renaming import renamable, rename_names
from idiomizer.enums import PassFamily


class NumericSuffixTransformer(PassTransformer):
  """
  Strips numeric suffixes from binders of each function definition.
  """

  def _target(self, name: str, taken: Set[str]) -> Optional[str]:
    if is_wildcard(name) or is_discard(name) or name in self.config.preserved_names:
      return None
    if is_reserved(name, self.config):
      return None
    split = split_numeric_suffix(name)
    if split is None:
      return None
    base = split[0]
    if base not in taken and base not in KEYWORDS and not is_reserved(base, self.config):
      return base
    return first_free(self.config.rename_preferences, taken)

  def leave_Def(self, original: n.Def, updated: n.Def) -> n.Node:
    bound = collect_bound_names(updated)
    taken = collect_names(updated)
    mapping: Dict[str, str] = {}
    for name in sorted(bound):
      target = self._target(name, taken)
      if target is None or not renamable(name, updated):
        continue
      mapping[name] = target
      taken.add(target)
    if not mapping:
      return updated
    self.record(len(mapping))
    return rename_names(updated, mapping)


class NumericSuffixRenamePass(TransformerPass):
  """
  Renames ``name2``-style binders to their base or a descriptive name.
  """

  name = "numeric_suffix_rename"
  family = PassFamily.BINDER_HYGIENE
  transformer_class = NumericSuffixTransformer
