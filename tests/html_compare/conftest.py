"""Shared fixtures for the HTML Compare tests."""

import pytest

from config_logging import CompareConfig, reset_config
from html_compare.comparator import HtmlComparator
from html_compare.inline_diff import InlineDiffer


@pytest.fixture(autouse=True)
def fresh_config():
    """Each test starts from a config built from its own environment."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def differ() -> InlineDiffer:
    return InlineDiffer()


@pytest.fixture
def comparator() -> HtmlComparator:
    return HtmlComparator(CompareConfig())
