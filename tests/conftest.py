# Shared fixtures: headless matplotlib, a small record corpus and fresh
# dashboard services per test.

import os

import matplotlib
import pytest

matplotlib.use("Agg")
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from incident_charts.app.session import SessionStore  # noqa: E402
from incident_charts.interaction.tooltip import TooltipContext  # noqa: E402
from incident_charts.services.event_bus import EventBus  # noqa: E402
from tests.factories import sample_records  # noqa: E402


@pytest.fixture
def records():
    return sample_records()


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def tooltip():
    return TooltipContext()
