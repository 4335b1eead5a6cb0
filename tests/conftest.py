"""Shared pytest setup."""
import os

# Keep test runs off the filesystem and quiet on stderr. Must happen before
# RoyaleBot.logger is imported for the first time.
os.environ.setdefault("ROYALE_LOG_TO_FILE", "0")
os.environ.setdefault("ROYALE_CONSOLE_LEVEL", "CRITICAL")

import pytest

from RoyaleBot.policy.config import PolicyConfig
from tests.factories import standard_sites


@pytest.fixture
def sites():
    """A small 6-site map, see tests.factories.standard_sites."""
    return standard_sites()


@pytest.fixture
def config():
    return PolicyConfig()
