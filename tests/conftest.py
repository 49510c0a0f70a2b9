"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- A pass runner fixture returning the rewritten tree and its context.
- Console isolation so tests capturing log output do not leak handlers.
"""

import sys
from pathlib import Path

import pytest

# Add src to path so we can import 'idiomizer' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from idiomizer.config import RuntimeConfig  # noqa: E402
from idiomizer.core.rewriter.context import RewriterContext  # noqa: E402
from idiomizer.utils.console import reset_console  # noqa: E402


class PassRunner:
  """
  Applies a single pass to a tree with a fresh context.
  """

  def __init__(self, config: RuntimeConfig):
    self.config = config
    self.context = None

  def __call__(self, pass_cls, tree, config: RuntimeConfig = None):
    """
    Runs ``pass_cls`` once over ``tree``.

    Args:
        pass_cls: The ``RewriterPass`` subclass to instantiate.
        tree: The input tree.
        config: Overrides the runner's default configuration.

    Returns:
        The rewritten tree. The context of the run is kept on ``self.context``.
    """
    self.context = RewriterContext(config or self.config)
    return pass_cls().transform(tree, self.context)


@pytest.fixture
def config():
  """Default configuration without a project name."""
  return RuntimeConfig()


@pytest.fixture
def run_pass(config):
  """Fixture returning a ``PassRunner`` bound to the default configuration."""
  return PassRunner(config)


@pytest.fixture(autouse=True)
def isolate_console():
  """
  Restores the standard-error console after each test so a recording
  console injected by one test does not capture the next one's output.
  """
  yield
  reset_console()
