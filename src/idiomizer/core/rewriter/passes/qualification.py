"""
Framework Alias Qualification.

Generated modules refer to application services by their bare alias
(``Repo.all(query)``, ``%Presence{}``). Unless the module declares an
``alias`` for that name, the reference is qualified with the configured
project name (``TodoApp.Repo.all(query)``). Without a project name the pass
does nothing.
"""

from typing import Set

from idiomizer.core import nodes as n
from idiomizer.core import patterns as p
from idiomizer.core.rewriter.base import PassTransformer, TransformerPass
from idiomizer.core.transformer import transform
from idiomizer.enums import PassFamily


class QualificationTransformer(PassTransformer):
  """
  Qualifies bare framework aliases inside each module.
  """

  def _qualify_module(self, module: n.Module, bare: Set[str]) -> n.Module:
    project = self.context.project_name
    count = 0

    def qualify(name: str) -> str:
      nonlocal count
      if name in bare:
        count += 1
        return f"{project}.{name}"
      return name

    def visit(item):
      if isinstance(item, n.ModuleRef):
        return item.with_changes(name=qualify(item.name))
      if isinstance(item, (n.StructLit, n.StructUpdate, p.PStruct)):
        return item.with_changes(module=qualify(item.module))
      return item

    body = tuple(stmt if isinstance(stmt, n.Module) else transform(stmt, visit) for stmt in module.body)
    result = module.with_changes(body=body) if count else module
    if count:
      self.record(count)
    return result

  def leave_Module(self, original: n.Module, updated: n.Module) -> n.Node:
    project = self.context.project_name
    if not project:
      return updated
    aliased = {stmt.local_name for stmt in updated.body if isinstance(stmt, n.Alias)}
    bare = set(self.config.qualified_aliases) - aliased
    if not bare:
      return updated
    return self._qualify_module(updated, bare)


class RepoQualificationPass(TransformerPass):
  """
  Prefixes bare framework aliases with the project module name.
  """

  name = "repo_qualification"
  family = PassFamily.QUALIFICATION
  transformer_class = QualificationTransformer
