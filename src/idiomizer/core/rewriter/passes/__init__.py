"""
Pass Catalog Package.
"""

from idiomizer.core.rewriter.passes.aliases import ElementCopyEliminationPass, ReduceAccumulatorAliasPass
from idiomizer.core.rewriter.passes.chains import TempChainCollapsePass, TrailingBindingReturnPass
from idiomizer.core.rewriter.passes.dead_store import DeadStoreDiscardPass, SelfAssignmentRemovalPass
from idiomizer.core.rewriter.passes.dispatch import ConstantConditionPass, UnreachableClauseRemovalPass
from idiomizer.core.rewriter.passes.flattening import NestedCaseFlatteningPass
from idiomizer.core.rewriter.passes.hoisting import AssignmentBlockHoistPass
from idiomizer.core.rewriter.passes.hygiene import (
  DiscardPromotionPass,
  LoopNameRestorePass,
  ParameterDiscardPass,
  UnusedBinderMarkPass,
)
from idiomizer.core.rewriter.passes.printer_shape import EmptyElseRemovalPass, PrinterShapeRepairPass
from idiomizer.core.rewriter.passes.qualification import RepoQualificationPass
from idiomizer.core.rewriter.passes.suffixes import NumericSuffixRenamePass

__all__ = [
  "AssignmentBlockHoistPass",
  "ConstantConditionPass",
  "DeadStoreDiscardPass",
  "DiscardPromotionPass",
  "ElementCopyEliminationPass",
  "EmptyElseRemovalPass",
  "LoopNameRestorePass",
  "NestedCaseFlatteningPass",
  "NumericSuffixRenamePass",
  "ParameterDiscardPass",
  "PrinterShapeRepairPass",
  "ReduceAccumulatorAliasPass",
  "RepoQualificationPass",
  "SelfAssignmentRemovalPass",
  "TempChainCollapsePass",
  "TrailingBindingReturnPass",
  "UnreachableClauseRemovalPass",
  "UnusedBinderMarkPass",
]
