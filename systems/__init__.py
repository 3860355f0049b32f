from .telemetry import Telemetry, EventType
from .notices import NoticeBoard
from .navigation import Bounds, navigation_bounds
from .economy import EconomyLedger, UpgradeKind, UpgradeLevels
from .movement import MovementController
from .targeting import TargetingStateMachine, TargetingConfig
from .clock import SimulationClock, FrameDriver, BackgroundDriver, LoopScheduler
from .persistence import SnapshotStore, InMemorySnapshotStore, JsonFileSnapshotStore
