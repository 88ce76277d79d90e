#!/usr/bin/env python3
"""
BASEBOT - Keyed Locks

One asyncio.Lock per key, created on demand.
"""

import asyncio
from collections import defaultdict
from collections.abc import Hashable


class KeyedLocks:
    """
    Lazily-created per-key locks.

    Locks are never evicted; with one entry per chat user this stays small
    for a single-process deployment.
    """

    def __init__(self):
        self._locks: dict[Hashable, asyncio.Lock] = defaultdict(asyncio.Lock)

    def __call__(self, key: Hashable) -> asyncio.Lock:
        return self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)
