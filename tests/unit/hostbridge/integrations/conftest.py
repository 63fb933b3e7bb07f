"""Fixtures shared by the integration tests."""

from unittest.mock import MagicMock

import pytest


@pytest.fixture
def bridge(settings, connected_supervisor, event_loop):
    """Bridge stand-in carrying what integrations reach for."""
    return MagicMock(settings=settings, supervisor=connected_supervisor, loop=event_loop)
