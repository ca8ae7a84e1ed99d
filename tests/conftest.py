"""Shared fixtures for the pulse system tests"""

import pytest

from pulse_system.sensors.max30102 import MAX30102Config


@pytest.fixture
def config():
    return MAX30102Config()


@pytest.fixture
def replay_config():
    return MAX30102Config.for_replay()
