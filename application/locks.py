"""Per-villa serialization point for availability writes"""
import asyncio
from typing import Dict


class VillaLockRegistry:
    """One ``asyncio.Lock`` per villa id

    Every confirmation for a villa re-validates and merges while holding its
    lock, so two overlapping stays cannot both pass the conflict check.
    Share a single registry between all service instances.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}

    def for_villa(self, villa_id: str) -> asyncio.Lock:
        lock = self._locks.get(villa_id)
        if lock is None:
            lock = self._locks[villa_id] = asyncio.Lock()
        return lock
