"""
Dirt field - the debris particles scattered over the floor.

Particles live in a uniform grid index so radius queries only touch the
buckets that overlap the query circle.
"""
import math
import random
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import (
    DIRT_COUNT, DIRT_INDEX_CELL, FLOOR_LEFT, FLOOR_RIGHT, FLOOR_TOP, FLOOR_BOTTOM
)
from utils.math_helpers import Bounds

CellKey = Tuple[int, int]


@dataclass
class DirtParticle:
    """A single speck of debris on the floor."""
    id: int
    x: float
    y: float
    size: float = 0.02
    collected: bool = False

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Cluster:
    """Uncollected debris aggregated over one grid cell."""
    key: CellKey
    count: int
    center: Tuple[float, float]


def cell_key(x: float, y: float, cell_size: float) -> CellKey:
    """Grid cell containing a point."""
    return (int(math.floor(x / cell_size)), int(math.floor(y / cell_size)))


def cell_center(key: CellKey, cell_size: float) -> Tuple[float, float]:
    """Geometric midpoint of a grid cell."""
    return (key[0] * cell_size + cell_size / 2, key[1] * cell_size + cell_size / 2)


class DirtField:
    """
    Owns every particle of the current field.

    The collected flag is monotonic: only a fresh `generate` (or loading a
    different field) brings particles back.
    """

    def __init__(
        self,
        particles: Optional[Iterable[DirtParticle]] = None,
        index_cell: float = DIRT_INDEX_CELL
    ):
        self.index_cell = index_cell
        self.particles: List[DirtParticle] = []
        self._by_id: Dict[int, DirtParticle] = {}
        self._index: Dict[CellKey, List[DirtParticle]] = defaultdict(list)
        self._uncollected = 0

        if particles is not None:
            self._load(particles)

    def _load(self, particles: Iterable[DirtParticle]):
        """Replace the field contents and rebuild the spatial index."""
        self.particles = list(particles)
        self._by_id = {}
        self._index = defaultdict(list)
        self._uncollected = 0

        for particle in self.particles:
            if particle.id in self._by_id:
                raise ValueError(f"duplicate particle id {particle.id}")
            self._by_id[particle.id] = particle
            self._index[cell_key(particle.x, particle.y, self.index_cell)].append(particle)
            if not particle.collected:
                self._uncollected += 1

    # =========================================================================
    # GENERATION
    # =========================================================================

    def generate(
        self,
        count: int = DIRT_COUNT,
        bounds: Optional[Bounds] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Scatter `count` fresh particles uniformly inside `bounds`.

        Args:
            count: Number of particles
            bounds: Area to scatter over (the whole floor when omitted)
            rng: Random source (module-level random when omitted)
        """
        if count < 0:
            raise ValueError("particle count must be non-negative")
        rng = rng or random.Random()
        bounds = bounds or Bounds(FLOOR_LEFT, FLOOR_RIGHT, FLOOR_TOP, FLOOR_BOTTOM)

        particles = []
        for i in range(count):
            x, y = bounds.random_point(rng)
            particles.append(DirtParticle(
                id=i,
                x=x,
                y=y,
                size=rng.uniform(0.01, 0.03),
            ))
        self._load(particles)

    # =========================================================================
    # QUERIES
    # =========================================================================

    @property
    def total(self) -> int:
        return len(self.particles)

    @property
    def uncollected_count(self) -> int:
        return self._uncollected

    def get(self, particle_id: int) -> Optional[DirtParticle]:
        return self._by_id.get(particle_id)

    def query_near(self, point: Tuple[float, float], radius: float) -> Set[int]:
        """
        Ids of uncollected particles within `radius` of `point`.

        Args:
            point: Query centre
            radius: Inclusive search radius

        Returns:
            Set of particle ids
        """
        if radius < 0:
            return set()

        px, py = point
        min_key = cell_key(px - radius, py - radius, self.index_cell)
        max_key = cell_key(px + radius, py + radius, self.index_cell)
        radius_sq = radius * radius

        found = set()
        for cx in range(min_key[0], max_key[0] + 1):
            for cy in range(min_key[1], max_key[1] + 1):
                for particle in self._index.get((cx, cy), ()):
                    if particle.collected:
                        continue
                    dx = particle.x - px
                    dy = particle.y - py
                    if dx * dx + dy * dy <= radius_sq:
                        found.add(particle.id)
        return found

    def clusters(self, cell_size: float) -> List[Cluster]:
        """
        Bucket uncollected particles into square cells.

        Each non-empty cell yields a cluster centred on the cell midpoint
        (not the particle centroid).
        """
        if cell_size <= 0:
            raise ValueError("cell size must be positive")

        counts: Dict[CellKey, int] = defaultdict(int)
        for particle in self.particles:
            if not particle.collected:
                counts[cell_key(particle.x, particle.y, cell_size)] += 1

        return [
            Cluster(key=key, count=count, center=cell_center(key, cell_size))
            for key, count in counts.items()
        ]

    def density_grid(self, cell_size: float) -> Dict[CellKey, int]:
        """Per-cell uncollected counts, for the heat map overlay."""
        return {c.key: c.count for c in self.clusters(cell_size)}

    def clean_fraction(self) -> float:
        """Share of the field already collected, in [0, 1]."""
        if not self.particles:
            return 0.0
        return (self.total - self._uncollected) / self.total

    # =========================================================================
    # MUTATION
    # =========================================================================

    def collect(self, ids: Iterable[int]) -> int:
        """
        Mark particles collected.

        Unknown or already-collected ids are ignored.

        Returns:
            Number of particles newly collected
        """
        newly = 0
        for particle_id in ids:
            particle = self._by_id.get(particle_id)
            if particle is None or particle.collected:
                continue
            particle.collected = True
            newly += 1
        self._uncollected -= newly
        return newly

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def to_records(self) -> List[dict]:
        return [
            {'id': p.id, 'x': p.x, 'y': p.y, 'size': p.size, 'collected': p.collected}
            for p in self.particles
        ]

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> 'DirtField':
        """Build a field from saved records. Raises on malformed input."""
        particles = []
        for record in records:
            particle = DirtParticle(
                id=int(record['id']),
                x=float(record['x']),
                y=float(record['y']),
                size=float(record.get('size', 0.02)),
                collected=record['collected'],
            )
            if not isinstance(particle.collected, bool):
                raise ValueError(f"particle {particle.id}: collected must be a boolean")
            if not all(math.isfinite(v) for v in (particle.x, particle.y, particle.size)):
                raise ValueError(f"particle {particle.id}: non-finite coordinate")
            particles.append(particle)
        return cls(particles)

    def __repr__(self) -> str:
        return f"DirtField(total={self.total}, uncollected={self._uncollected})"
