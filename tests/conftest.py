import sys
from pathlib import Path

import pytest

# Add settleguard to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent))

from settleguard.pytest_plugin import settle_loop, settle_session  # noqa: E402,F401
from settleguard.config import SettleGuardConfig  # noqa: E402


@pytest.fixture
def config():
    """Deterministic config, independent of SETTLEGUARD_* variables."""
    return SettleGuardConfig(timeout_s=1.0)


@pytest.fixture
def loop(settle_loop):
    return settle_loop
