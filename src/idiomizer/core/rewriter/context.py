"""
Rewriter Context Module.

Holds the state shared by the passes of a single pipeline run: the read-only
runtime configuration, the run's trace logger and the record of which passes
changed the tree. A context is created per tree and discarded afterwards;
passes keep no state between runs.
"""

from typing import Dict, List, Optional

from idiomizer.config import RuntimeConfig
from idiomizer.core.tracer import TraceLogger


class RewriterContext:
  """
  Per-run state container for the rewriting pipeline.
  """

  def __init__(self, config: Optional[RuntimeConfig] = None, tracer: Optional[TraceLogger] = None) -> None:
    """
    Initializes the context.

    Args:
        config: The runtime configuration. Defaults are used when omitted.
        tracer: Trace logger for this run. A fresh one is created when omitted.
    """
    self.config = config or RuntimeConfig()
    self.tracer = tracer or TraceLogger()
    self.rewrite_counts: Dict[str, int] = {}
    self.changed_passes: List[str] = []

  @property
  def project_name(self) -> Optional[str]:
    """The configured project (application) name, if any."""
    return self.config.project_name

  def count_rewrite(self, pass_name: str, amount: int = 1) -> None:
    """
    Records rewrites performed by a pass.

    Args:
        pass_name: The pass identifier.
        amount: Number of rewrites to add.
    """
    self.rewrite_counts[pass_name] = self.rewrite_counts.get(pass_name, 0) + amount

  def mark_changed(self, pass_name: str) -> None:
    """
    Records that a pass application changed the tree.

    Args:
        pass_name: The pass identifier (listed once per changing application).
    """
    self.changed_passes.append(pass_name)
