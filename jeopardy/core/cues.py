"""
Audio cue dispatch boundary

The session only emits CueEvent values. CueLog keeps a bounded history so a
client can poll and play the matching sounds; it never plays audio itself.
"""
import itertools
import logging
from collections import deque
from typing import Deque, Dict, List

from jeopardy.models import CueEvent


logger = logging.getLogger(__name__)


class CueLog:
    """Bounded, pollable record of emitted cues with mute/volume settings"""

    def __init__(self, maxlen: int = 100, enabled: bool = True, volume: float = 0.6):
        self._entries: Deque[Dict] = deque(maxlen=maxlen)
        self._seq = itertools.count(1)
        self.muted = not enabled
        self.volume = self._clamp_volume(volume)

    @staticmethod
    def _clamp_volume(volume: float) -> float:
        return min(1.0, max(0.0, float(volume)))

    def set_volume(self, volume: float) -> float:
        self.volume = self._clamp_volume(volume)
        return self.volume

    def __call__(self, event: CueEvent) -> None:
        if self.muted:
            logger.debug(f"🔇 cue {event.value} suppressed (muted)")
            return
        entry = {"seq": next(self._seq), "event": event.value, "volume": self.volume}
        self._entries.append(entry)
        logger.debug(f"🔊 cue #{entry['seq']} {event.value}")

    def since(self, seq: int = 0) -> List[Dict]:
        """Entries with a sequence number greater than `seq`"""
        return [entry for entry in self._entries if entry["seq"] > seq]

    @property
    def events(self) -> List[str]:
        return [entry["event"] for entry in self._entries]

    def clear(self) -> None:
        self._entries.clear()
