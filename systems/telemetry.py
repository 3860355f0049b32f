"""
Telemetry system - event log and running statistics.
"""
from typing import List, Dict, Any
from dataclasses import dataclass, field
from enum import Enum


class EventType(Enum):
    """Types of events that can be logged."""
    COLLECTION = "collection"
    MODE_CHANGE = "mode_change"
    TARGET_SET = "target_set"
    NUDGE = "nudge"
    PURCHASE = "purchase"
    LEVEL_COMPLETE = "level_complete"
    FIELD_RESET = "field_reset"
    ERROR = "error"


@dataclass
class TelemetryEvent:
    """A single logged event."""
    timestamp: float
    event_type: EventType
    data: Dict[str, Any] = field(default_factory=dict)


class Telemetry:
    """
    Tracks and logs simulation events.

    Timestamps are simulation milliseconds supplied by the caller, so a
    replayed run produces the same log.
    """

    def __init__(self, max_events: int = 5000):
        self.events: List[TelemetryEvent] = []
        self.max_events = max_events

        # Statistics
        self.stats: Dict[str, Any] = {
            'particles_collected': 0,
            'money_earned': 0.0,
            'distance_traveled': 0.0,
            'nudges': 0,
            'purchases': 0,
            'faults': 0,
            'mode_changes': 0,
        }

    def log(
        self,
        event_type: EventType,
        timestamp: float,
        data: Dict[str, Any] = None
    ):
        """
        Log an event.

        Args:
            event_type: Type of event
            timestamp: Simulation time in ms
            data: Additional event data
        """
        event = TelemetryEvent(
            timestamp=timestamp,
            event_type=event_type,
            data=data or {}
        )
        self.events.append(event)
        if len(self.events) > self.max_events:
            del self.events[:len(self.events) - self.max_events]

        # Update statistics
        self._update_stats(event)

    def _update_stats(self, event: TelemetryEvent):
        """Update statistics based on event."""
        if event.event_type == EventType.COLLECTION:
            self.stats['particles_collected'] += event.data.get('count', 0)
            self.stats['money_earned'] += event.data.get('money', 0.0)

        elif event.event_type == EventType.NUDGE:
            self.stats['nudges'] += 1

        elif event.event_type == EventType.PURCHASE:
            self.stats['purchases'] += 1

        elif event.event_type == EventType.ERROR:
            self.stats['faults'] += 1

        elif event.event_type == EventType.MODE_CHANGE:
            self.stats['mode_changes'] += 1

    def add_distance(self, dist: float):
        """Accumulate distance traveled by the robot."""
        self.stats['distance_traveled'] += dist

    def get_stats(self) -> Dict[str, Any]:
        """Get current statistics."""
        return {
            **self.stats,
            'events_logged': len(self.events),
        }

    def get_recent_events(self, count: int = 10) -> List[TelemetryEvent]:
        """Get the most recent events."""
        return self.events[-count:]

    def count(self, event_type: EventType) -> int:
        return sum(1 for e in self.events if e.event_type == event_type)

    def export_log(self, filepath: str):
        """Export event log to a file."""
        with open(filepath, 'w') as f:
            f.write("Roomba Simulation Telemetry Log\n")
            f.write(f"Total Events: {len(self.events)}\n")
            f.write("\n--- Statistics ---\n")
            for key, value in self.stats.items():
                f.write(f"{key}: {value}\n")
            f.write("\n--- Events ---\n")
            for event in self.events:
                f.write(
                    f"[{event.timestamp / 1000:.2f}s] "
                    f"{event.event_type.value}: {event.data}\n"
                )

    def __repr__(self) -> str:
        return f"Telemetry(events={len(self.events)})"
