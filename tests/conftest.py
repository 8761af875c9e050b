"""
Pytest configuration for the Placeholder test suite.
"""

import sys
from pathlib import Path

import pytest

# Add the repository root to the path so absolute imports work
# (tests/ is inside the repository, so parent is the root)
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from protocol.params import PlaceholderParams  # noqa: E402


@pytest.fixture
def fast_params() -> PlaceholderParams:
    """Small blowup and few queries, enough for end-to-end tests."""
    return PlaceholderParams(blowup_log=2, lambda_=6)
