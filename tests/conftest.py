import sys, os

# Ensure src is on path for test imports
ROOT = os.path.dirname(os.path.dirname(__file__))
SRC = os.path.join(ROOT, 'src')
for path in (SRC, ROOT):
    if path not in sys.path:
        sys.path.insert(0, path)

import pytest

from turnkeeper.events.bus import EventBus
from turnkeeper.systems.turn_system import TurnSystem
from turnkeeper.world import create_world


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def world(bus):
    return create_world(bus)


@pytest.fixture
def turn_system(world, bus):
    return TurnSystem(world, bus)
