"""Shared pytest fixtures for the bridge tracker test-suite."""
from __future__ import annotations

import pytest

from bridge_tracker.config import TrackerSettings
from bridge_tracker.store import TrackStore

from factories import CONTRACT


@pytest.fixture()
def settings() -> TrackerSettings:
    """Mainnet thresholds against the mainnet contract, with polling delays removed."""
    return TrackerSettings(
        bridge_contract=CONTRACT,
        poll_interval=0,
        hidden_poll_interval=0,
        max_consecutive_errors=2,
    )


@pytest.fixture()
def store() -> TrackStore:
    return TrackStore()
