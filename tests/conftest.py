import os
import sys

import pytest

# Get the path to the project root (one level up from 'tests')
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
src_path = os.path.join(project_root, 'src')

# Add 'src' to sys.path
sys.path.insert(0, src_path)

from rocketframe import AxialStage, BodyTube, NoseCone, Rocket  # noqa: E402


@pytest.fixture
def rocket():
    """Single-stage rocket: 0.15 m ogive nose cone followed by a 0.4 m body tube."""
    r = Rocket()
    stage = AxialStage()
    r.add_child(stage)
    stage.add_child(NoseCone(length=0.15, aft_radius=0.025))
    stage.add_child(BodyTube(length=0.4, outer_radius=0.025))
    return r


@pytest.fixture
def stage(rocket):
    return rocket.get_child(0)


@pytest.fixture
def nose(stage):
    return stage.get_child(0)


@pytest.fixture
def tube(stage):
    return stage.get_child(1)


@pytest.fixture
def events(rocket):
    """List collecting every event delivered by the rocket's bus."""
    received = []
    rocket.change_bus.add_listener(received.append)
    return received
