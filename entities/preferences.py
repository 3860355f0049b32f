"""
Display preferences persisted alongside the game state.
"""
from dataclasses import dataclass, asdict, fields


@dataclass
class UiPreferences:
    show_heatmap: bool = False
    show_frame: bool = True
    overhang: bool = True
    camera_auto: bool = False

    def as_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def names(cls):
        return [f.name for f in fields(cls)]
