"""
Exception hierarchy for idiomizer.

The normalization pipeline itself never raises for a well-formed tree: passes
that are unsure of a shape return it unchanged. The exceptions below cover the
edges of the system (contract violations by the tree builder, invalid
configuration, and the reference evaluator used in tests).
"""


class IdiomizerError(Exception):
  """Base class for all errors raised by idiomizer."""

  pass


class MalformedTreeError(IdiomizerError, TypeError):
  """
  Raised when a tree violates the node grammar.

  This is an upstream contract violation (the builder produced a child slot
  holding something that is neither a node, a pattern, nor a supported
  container of them).
  """

  pass


class ConfigError(IdiomizerError, ValueError):
  """Raised when runtime configuration cannot be validated."""

  pass


class EvaluationError(IdiomizerError):
  """Raised by the reference evaluator for shapes outside its supported subset."""

  pass


class MatchFailure(EvaluationError):
  """Raised by the reference evaluator when a pattern does not match a value."""

  pass
