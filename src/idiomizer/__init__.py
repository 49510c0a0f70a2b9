"""
idiomizer: normalization of generated intermediate trees into idiomatic form.

A generated tree (built upstream from another program) is passed through a
fixed pipeline of narrow, conservative rewrite passes guided by a scope-aware
usage analyzer. The result is a tree in the same grammar, free of the
generation artifacts the passes target and semantically equivalent to the
input.
"""

from typing import Optional

from idiomizer.config import RuntimeConfig
from idiomizer.core.engine import NormalizationResult, NormalizerEngine
from idiomizer.core.nodes import Node
from idiomizer.errors import ConfigError, EvaluationError, IdiomizerError, MalformedTreeError

__version__ = "0.1.0"


def normalize(tree: Node, project_name: Optional[str] = None, config: Optional[RuntimeConfig] = None) -> Node:
  """
  Normalizes one tree with the default pass order.

  Args:
      tree: The generated tree of one compilation unit.
      project_name: Project module name used to qualify framework aliases.
          Overrides the value of ``config`` when given.
      config: Runtime configuration. Defaults apply when omitted.

  Returns:
      Node: The normalized tree.
  """
  base = config or RuntimeConfig()
  if project_name is not None:
    base = base.with_project(project_name)
  return NormalizerEngine(base).run(tree).tree


__all__ = [
  "ConfigError",
  "EvaluationError",
  "IdiomizerError",
  "MalformedTreeError",
  "NormalizationResult",
  "NormalizerEngine",
  "RuntimeConfig",
  "normalize",
  "__version__",
]
