"""
Persistence gateway - epoch-versioned snapshot storage.

A snapshot document holds the full game state, the UI preferences, the
whole dirt field and a write timestamp:

    {
        "game_state": {...},
        "ui_state": {...},
        "particles": [{"id", "x", "y", "size", "collected"}, ...],
        "timestamp": <ms since the Unix epoch>
    }

Snapshots are keyed by an integer epoch. Starting a new game bumps the
epoch and deletes every older snapshot.
"""
import json
import math
import logging
import time
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, TYPE_CHECKING

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import UPGRADE_COSTS
from entities.dirt import DirtField
from entities.preferences import UiPreferences
from entities.robot import Robot, Battery
from systems.economy import UpgradeLevels, UpgradeKind

if TYPE_CHECKING:
    from simulation import SimulationState

logger = logging.getLogger(__name__)


class SnapshotError(ValueError):
    """A snapshot document is malformed or violates a state invariant."""


# =============================================================================
# STORES
# =============================================================================

class SnapshotStore(ABC):
    """Versioned snapshot storage. The core never sees the medium."""

    @abstractmethod
    def current_epoch(self) -> int:
        ...

    @abstractmethod
    def set_epoch(self, epoch: int):
        ...

    @abstractmethod
    def load(self, epoch: int) -> Optional[Dict[str, Any]]:
        """Raw document for an epoch, or None if absent or unreadable."""

    @abstractmethod
    def save(self, epoch: int, snapshot: Dict[str, Any]):
        ...

    @abstractmethod
    def delete_range(self, start: int, end: int):
        """Delete snapshots for epochs start..end inclusive."""


class InMemorySnapshotStore(SnapshotStore):
    """Dictionary-backed store, handy for tests and throwaway sessions."""

    def __init__(self, epoch: int = 1):
        self.epoch = epoch
        self.snapshots: Dict[int, str] = {}

    def current_epoch(self) -> int:
        return self.epoch

    def set_epoch(self, epoch: int):
        self.epoch = epoch

    def load(self, epoch: int) -> Optional[Dict[str, Any]]:
        raw = self.snapshots.get(epoch)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Snapshot for epoch %d is not valid JSON", epoch)
            return None

    def save(self, epoch: int, snapshot: Dict[str, Any]):
        self.snapshots[epoch] = json.dumps(snapshot)

    def delete_range(self, start: int, end: int):
        for epoch in range(start, end + 1):
            self.snapshots.pop(epoch, None)


class JsonFileSnapshotStore(SnapshotStore):
    """
    One JSON file per epoch in a directory, plus an `epoch` file holding
    the current epoch number.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, epoch: int) -> Path:
        return self.directory / f"save_{epoch}.json"

    @property
    def _epoch_path(self) -> Path:
        return self.directory / "epoch"

    def current_epoch(self) -> int:
        try:
            return max(1, int(self._epoch_path.read_text().strip()))
        except (OSError, ValueError):
            return 1

    def set_epoch(self, epoch: int):
        self.directory.mkdir(parents=True, exist_ok=True)
        self._epoch_path.write_text(str(epoch))

    def load(self, epoch: int) -> Optional[Dict[str, Any]]:
        path = self._path(epoch)
        if not path.exists():
            return None
        try:
            with path.open(encoding="utf-8") as fp:
                return json.load(fp)
        except (OSError, ValueError) as e:
            logger.warning("Failed to read %s: %s", path, e)
            return None

    def save(self, epoch: int, snapshot: Dict[str, Any]):
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(epoch)
        tmp = path.with_suffix(".tmp")
        with tmp.open("w", encoding="utf-8") as fp:
            json.dump(snapshot, fp)
        tmp.replace(path)

    def delete_range(self, start: int, end: int):
        for epoch in range(start, end + 1):
            try:
                self._path(epoch).unlink()
            except FileNotFoundError:
                pass


# =============================================================================
# ENCODING
# =============================================================================

def encode_snapshot(state: 'SimulationState', timestamp: Optional[float] = None) -> Dict[str, Any]:
    """Build a JSON-ready snapshot document from the live state."""
    robot = state.robot
    return {
        'game_state': {
            'robot': {
                'x': robot.x,
                'y': robot.y,
                'vx': robot.vx,
                'vy': robot.vy,
                'heading': robot.heading,
                'speed': robot.base_speed,
                'suction': robot.suction,
                'bin': robot.bin,
                'bin_capacity': robot.bin_capacity,
            },
            'energy': state.battery.energy,
            'energy_max': state.battery.energy_max,
            'money': state.money,
            'cleaning': state.cleaning,
            'level_complete': state.level_complete,
            'ai_enabled': state.ai_enabled,
            'background': state.background,
            'autosave': state.autosave,
            'upgrades': state.upgrades.as_dict(),
        },
        'ui_state': state.prefs.as_dict(),
        'particles': state.dirt.to_records(),
        'timestamp': timestamp if timestamp is not None else time.time() * 1000,
    }


@dataclass
class SavedGame:
    """Fully-validated contents of a snapshot."""
    robot: Robot
    battery: Battery
    money: float
    upgrades: UpgradeLevels
    cleaning: bool
    level_complete: bool
    ai_enabled: bool
    background: bool
    autosave: bool
    prefs: UiPreferences
    dirt: DirtField
    timestamp: float


def _require_bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise SnapshotError(f"{name} must be a boolean")
    return value


def _require_finite(value: Any, name: str) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise SnapshotError(f"{name} must be a finite number")
    return number


def decode_snapshot(doc: Any) -> SavedGame:
    """
    Parse and validate a snapshot document.

    Everything is built fresh; nothing is returned unless the whole
    document is valid.

    Raises:
        SnapshotError: On any missing field, bad type or broken invariant
    """
    try:
        game = doc['game_state']
        r = game['robot']

        robot = Robot(
            position=(_require_finite(r['x'], 'x'), _require_finite(r['y'], 'y')),
            base_speed=_require_finite(r['speed'], 'speed'),
            suction=int(r['suction']),
            bin_capacity=_require_finite(r['bin_capacity'], 'bin_capacity'),
        )
        robot.vx = _require_finite(r['vx'], 'vx')
        robot.vy = _require_finite(r['vy'], 'vy')
        robot.heading = _require_finite(r.get('heading', 0.0), 'heading')
        robot.bin = _require_finite(r['bin'], 'bin')

        energy_max = _require_finite(game['energy_max'], 'energy_max')
        energy = _require_finite(game['energy'], 'energy')
        money = _require_finite(game['money'], 'money')

        upgrades = UpgradeLevels()
        for kind in UpgradeKind:
            level = int(game['upgrades'].get(kind.value, 0))
            if not 0 <= level <= len(UPGRADE_COSTS[kind.value]):
                raise SnapshotError(f"upgrade {kind.value} level {level} out of range")
            upgrades.set(kind, level)

        ui = doc.get('ui_state') or {}
        prefs = UiPreferences(**{
            name: _require_bool(ui[name], name)
            for name in UiPreferences.names() if name in ui
        })

        dirt = DirtField.from_records(doc['particles'])

        saved = SavedGame(
            robot=robot,
            battery=Battery(energy_max, energy),
            money=money,
            upgrades=upgrades,
            cleaning=_require_bool(game['cleaning'], 'cleaning'),
            level_complete=_require_bool(game['level_complete'], 'level_complete'),
            ai_enabled=_require_bool(game['ai_enabled'], 'ai_enabled'),
            background=_require_bool(game.get('background', False), 'background'),
            autosave=_require_bool(game.get('autosave', True), 'autosave'),
            prefs=prefs,
            dirt=dirt,
            timestamp=_require_finite(doc.get('timestamp', 0), 'timestamp'),
        )
    except SnapshotError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError, OverflowError) as e:
        raise SnapshotError(f"malformed snapshot: {e!r}") from e

    if not 0 <= robot.bin <= robot.bin_capacity:
        raise SnapshotError("bin outside [0, capacity]")
    if not 0 <= energy <= energy_max:
        raise SnapshotError("energy outside [0, energy_max]")
    if money < 0:
        raise SnapshotError("money is negative")

    return saved


# =============================================================================
# AUTOSAVE
# =============================================================================

class AutosaveWriter:
    """
    Fire-and-forget snapshot writes on a single worker thread.

    The document must be fully built by the caller before submitting so the
    worker never touches live simulation state.
    """

    def __init__(self, store: SnapshotStore):
        self.store = store
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="autosave")
        self.failures = 0

    def submit(self, epoch: int, snapshot: Dict[str, Any]) -> Future:
        future = self._executor.submit(self.store.save, epoch, snapshot)
        future.add_done_callback(self._report)
        return future

    def _report(self, future: Future):
        error = future.exception()
        if error is not None:
            self.failures += 1
            logger.warning("Autosave failed: %r", error)

    def flush(self):
        """Block until every write submitted so far has finished."""
        self._executor.submit(lambda: None).result()

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait)
