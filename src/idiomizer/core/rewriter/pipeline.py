"""
Orchestration logic for executing sequential rewriter passes.

This module provides the ``RewriterPipeline``, which applies an ordered list
of ``RewriterPass`` instances exactly once per tree, threading the full output
of each pass into the next. The default order is the literal
``DEFAULT_PASS_ORDER``; later passes may re-create shapes an earlier pass
targets, which is why the printer-shape repair runs again at the end.
"""

import logging
from typing import Dict, List, Sequence, Type

from idiomizer.core.nodes import Node
from idiomizer.core.printer import render
from idiomizer.core.rewriter.context import RewriterContext
from idiomizer.core.rewriter.interface import RewriterPass
from idiomizer.core.rewriter.passes import (
  AssignmentBlockHoistPass,
  ConstantConditionPass,
  DeadStoreDiscardPass,
  DiscardPromotionPass,
  ElementCopyEliminationPass,
  EmptyElseRemovalPass,
  LoopNameRestorePass,
  NestedCaseFlatteningPass,
  NumericSuffixRenamePass,
  ParameterDiscardPass,
  PrinterShapeRepairPass,
  ReduceAccumulatorAliasPass,
  RepoQualificationPass,
  SelfAssignmentRemovalPass,
  TempChainCollapsePass,
  TrailingBindingReturnPass,
  UnreachableClauseRemovalPass,
  UnusedBinderMarkPass,
)

logger = logging.getLogger(__name__)

PASS_REGISTRY: Dict[str, Type[RewriterPass]] = {
  cls.name: cls
  for cls in (
    PrinterShapeRepairPass,
    AssignmentBlockHoistPass,
    ConstantConditionPass,
    EmptyElseRemovalPass,
    UnreachableClauseRemovalPass,
    NestedCaseFlatteningPass,
    TempChainCollapsePass,
    SelfAssignmentRemovalPass,
    ReduceAccumulatorAliasPass,
    ElementCopyEliminationPass,
    TrailingBindingReturnPass,
    LoopNameRestorePass,
    NumericSuffixRenamePass,
    DiscardPromotionPass,
    DeadStoreDiscardPass,
    UnusedBinderMarkPass,
    ParameterDiscardPass,
    RepoQualificationPass,
  )
}

DEFAULT_PASS_ORDER = (
  "printer_shape_repair",
  "assignment_block_hoist",
  "constant_condition",
  "empty_else_removal",
  "unreachable_clause_removal",
  "nested_case_flattening",
  "temp_chain_collapse",
  "self_assignment_removal",
  "reduce_accumulator_alias",
  "element_copy_elimination",
  "trailing_binding_return",
  "loop_name_restore",
  "numeric_suffix_rename",
  "discard_promotion",
  "dead_store_discard",
  "unused_binder_mark",
  "parameter_discard",
  "repo_qualification",
  "printer_shape_repair",
)


class RewriterPipeline:
  """
  Manages a sequence of rewriting passes and executes them in order.
  """

  def __init__(self, passes: List[RewriterPass]) -> None:
    """
    Initializes the pipeline with a list of passes.

    Args:
        passes: Sequenced list of passes to execute.
    """
    self.passes = passes

  @property
  def order(self) -> List[str]:
    """Names of the scheduled passes, in execution order."""
    return [pass_instance.name for pass_instance in self.passes]

  def run(self, tree: Node, context: RewriterContext) -> Node:
    """
    Executes all registered passes sequentially on the tree.

    Args:
        tree: The tree to normalize.
        context: The per-run state containing configuration and tracing.

    Returns:
        The fully transformed tree.
    """
    tracer = context.tracer
    current = tree
    for pass_instance in self.passes:
      tracer.start_phase(pass_instance.name, pass_instance.family.value)
      updated = pass_instance.transform(current, context)
      if updated is not current and updated != current:
        context.mark_changed(pass_instance.name)
        logger.debug("Pass %s rewrote the tree", pass_instance.name)
        if context.config.trace_mutations:
          tracer.log_mutation(pass_instance.name, render(current), render(updated))
        else:
          tracer.log_mutation(pass_instance.name)
      else:
        logger.debug("Pass %s matched nothing", pass_instance.name)
        tracer.log_inspection(pass_instance.name)
      tracer.end_phase()
      current = updated

    return current


def build_pipeline(order: Sequence[str] = DEFAULT_PASS_ORDER) -> RewriterPipeline:
  """
  Instantiates the passes named in ``order``.

  Args:
      order: Pass names, in execution order (repetitions allowed).

  Returns:
      RewriterPipeline: The configured pipeline.

  Raises:
      KeyError: If a name is not a registered pass.
  """
  missing = [name for name in order if name not in PASS_REGISTRY]
  if missing:
    raise KeyError(f"Unknown rewrite passes: {', '.join(missing)}")
  return RewriterPipeline([PASS_REGISTRY[name]() for name in order])
