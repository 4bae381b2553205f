import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backup_jobgraph.config.resolvers import register_default_resolvers  # noqa: E402


@pytest.fixture(autouse=True)
def _resolvers():
    register_default_resolvers()
    yield
