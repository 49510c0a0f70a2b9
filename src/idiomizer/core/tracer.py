"""
Normalization Trace Logger.

Records the step-by-step execution of the pipeline:
1. Pass phases (one start/end pair per pass application).
2. Tree mutations (pass P changed the tree; optional before/after renderings).
3. Inspections (pass P ran and matched nothing).

The output is a structured list of event dictionaries suitable for JSON
serialization. A logger belongs to a single run; the engine creates a fresh
one for every tree so concurrent runs never share it.
"""

import time
import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class TraceEventType(str, Enum):
  PHASE_START = "phase_start"
  PHASE_END = "phase_end"
  TREE_MUTATION = "tree_mutation"
  INSPECTION = "inspection"


@dataclass
class TraceEvent:
  id: str
  type: TraceEventType
  timestamp: float
  description: str
  parent_id: Optional[str] = None
  metadata: Dict[str, Any] = field(default_factory=dict)


class TraceLogger:
  """
  Records pipeline events for inspection and debugging.
  """

  def __init__(self) -> None:
    self._events: List[TraceEvent] = []
    self._active_phases: List[str] = []

  @property
  def events(self) -> List[TraceEvent]:
    """Recorded events in order."""
    return list(self._events)

  def start_phase(self, name: str, description: str = "") -> str:
    """Starts a nested phase (e.g. one pass application). Returns the phase ID."""
    phase_id = str(uuid.uuid4())
    parent = self._active_phases[-1] if self._active_phases else None

    self._events.append(
      TraceEvent(
        id=phase_id,
        type=TraceEventType.PHASE_START,
        timestamp=time.time(),
        description=name,
        parent_id=parent,
        metadata={"detail": description},
      )
    )
    self._active_phases.append(phase_id)
    return phase_id

  def end_phase(self) -> None:
    """Ends the current active phase."""
    if not self._active_phases:
      return

    phase_id = self._active_phases.pop()
    self._events.append(
      TraceEvent(
        id=str(uuid.uuid4()),
        type=TraceEventType.PHASE_END,
        timestamp=time.time(),
        description="End Phase",
        parent_id=phase_id,
      )
    )

  def log_mutation(self, pass_name: str, before: Optional[str] = None, after: Optional[str] = None) -> None:
    """Logs that a pass changed the tree, optionally with renderings."""
    meta: Dict[str, Any] = {"pass": pass_name}
    if before is not None:
      meta["before"] = before
    if after is not None:
      meta["after"] = after
    self._log_simple(TraceEventType.TREE_MUTATION, f"Pass {pass_name} rewrote the tree", meta)

  def log_inspection(self, pass_name: str, outcome: str = "unchanged") -> None:
    """Logs a pass application that matched nothing."""
    self._log_simple(TraceEventType.INSPECTION, f"Pass {pass_name}", {"pass": pass_name, "outcome": outcome})

  def _log_simple(self, evt_type: TraceEventType, desc: str, meta: Dict[str, Any]) -> None:
    parent = self._active_phases[-1] if self._active_phases else None
    self._events.append(
      TraceEvent(
        id=str(uuid.uuid4()), type=evt_type, timestamp=time.time(), description=desc, parent_id=parent, metadata=meta
      )
    )

  def export(self) -> List[Dict[str, Any]]:
    """Returns list of dicts for JSON serialization."""
    return [asdict(e) for e in self._events]
