"""Settle-all fan-out for blocking GitHub calls.

PyGithub is synchronous, so each call is pushed onto a worker with
``asyncio.to_thread`` and the whole batch is awaited with
``asyncio.gather(return_exceptions=True)``: one failing call never cancels
its siblings, and the caller gets an outcome for every call in input order.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any


@dataclass
class Settled:
    result: Any = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def _gather(calls: Sequence[Callable[[], Any]]) -> list[Settled]:
    outcomes = await asyncio.gather(*(asyncio.to_thread(call) for call in calls), return_exceptions=True)
    settled = []
    for outcome in outcomes:
        if isinstance(outcome, Exception):
            settled.append(Settled(error=outcome))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            settled.append(Settled(result=outcome))
    return settled


def settle_all(calls: Sequence[Callable[[], Any]]) -> list[Settled]:
    """Run zero-argument callables concurrently and collect every outcome."""
    if not calls:
        return []
    return asyncio.run(_gather(calls))
