"""
Enumerations for idiomizer.

This module defines the enumerations shared by the node metadata, the pass
catalog and the trace logger.
"""

from enum import Enum


class NodeRole(str, Enum):
  """
  Structural role recorded by the tree builder for a node.

  Roles are optional hints; every pass must behave correctly when absent.
  """

  FUNCTION_PARAMETER = "function_parameter"
  REDUCE_ELEMENT = "reduce_element"
  REDUCE_ACCUMULATOR = "reduce_accumulator"
  GENERATOR_BINDER = "generator_binder"
  COMPREHENSION_BODY = "comprehension_body"
  LOOP_COUNTER = "loop_counter"


class PassFamily(str, Enum):
  """
  Concern a rewrite pass belongs to.

  Used for documentation of the pipeline order and for grouping trace events.
  """

  DEAD_STORE = "dead_store"
  BINDER_HYGIENE = "binder_hygiene"
  ALIAS_UNIFICATION = "alias_unification"
  DISPATCH = "dispatch"
  CHAIN_COLLAPSE = "chain_collapse"
  PRINTER_SHAPE = "printer_shape"
  QUALIFICATION = "qualification"
