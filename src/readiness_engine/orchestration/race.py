"""Deadline racing for score computations."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from readiness_engine.exceptions import ComputationTimeout

T = TypeVar("T")


async def race(awaitable: Awaitable[T], timeout_s: float, label: str = "computation") -> T:
    """Await *awaitable* under a deadline.

    On expiry the underlying task is cancelled (and with it every fetch it
    is awaiting) before ``ComputationTimeout`` is raised.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_s)
    except asyncio.TimeoutError as exc:
        raise ComputationTimeout(label, timeout_s) from exc
