"""
pre_core.utils
--------------
Small helpers shared by the protocol objects.
"""

from __future__ import annotations
import time


def now_epoch() -> int:
    # UTC seconds, the u32 timestamp used by node metadata and gossip responses
    return int(time.time())
