"""
Transient human-readable notices ("toasts") for the presentation layer.
"""
from dataclasses import dataclass
from typing import List

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import NOTICE_DURATION_MS

BATTERY_DEPLETED = "Battery depleted! Charge to continue."
BIN_FULL = "Bin full! Empty to continue."
LEVEL_COMPLETE = "Level Complete!"
TARGET_SET = "Target set"
CLICK_IGNORED = "AI mode active - click ignored"
MAX_LEVEL = "Max level reached"
NOT_ENOUGH_MONEY = "Not enough money"


@dataclass(frozen=True)
class Notice:
    message: str
    posted_at: float
    expires_at: float


class NoticeBoard:
    """Keeps recently posted notices until they expire (simulation time, ms)."""

    def __init__(self, duration_ms: float = NOTICE_DURATION_MS, keep: int = 20):
        self.duration_ms = duration_ms
        self.keep = keep
        self.notices: List[Notice] = []

    def post(self, message: str, now: float) -> Notice:
        notice = Notice(message, now, now + self.duration_ms)
        self.notices.append(notice)
        if len(self.notices) > self.keep:
            self.notices = self.notices[-self.keep:]
        return notice

    def active(self, now: float) -> List[Notice]:
        """Notices that have not yet expired, oldest first."""
        return [n for n in self.notices if n.expires_at > now]

    def messages(self) -> List[str]:
        """Every retained message regardless of expiry."""
        return [n.message for n in self.notices]
