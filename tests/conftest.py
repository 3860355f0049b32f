"""
Shared fixtures and builders for the simulation tests.
"""
import math
import random

import pytest

from entities.dirt import DirtField, DirtParticle
from simulation import Simulation
from systems.persistence import InMemorySnapshotStore


def ring_of_particles(center, count, radius, start_id=0):
    """`count` particles evenly spaced on a circle (radius strictly inside)."""
    particles = []
    for i in range(count):
        angle = 2 * math.pi * i / count
        particles.append(DirtParticle(
            id=start_id + i,
            x=center[0] + math.cos(angle) * radius,
            y=center[1] + math.sin(angle) * radius,
        ))
    return particles


def make_sim(particles=(), seed=7, **kwargs):
    """Simulation with an in-memory store and a hand-placed dirt field."""
    sim = Simulation(
        store=kwargs.pop('store', None) or InMemorySnapshotStore(),
        rng=random.Random(seed),
        dirt_count=kwargs.pop('dirt_count', 200),
        **kwargs
    )
    sim.state.dirt = DirtField(list(particles))
    return sim


@pytest.fixture
def sim():
    """Simulation holding 50 particles near the origin and 50 far away."""
    near = ring_of_particles((0.0, 0.0), 50, 0.15)
    far = ring_of_particles((3.0, 2.0), 50, 0.1, start_id=50)
    return make_sim(near + far)


@pytest.fixture
def rng():
    return random.Random(1234)
