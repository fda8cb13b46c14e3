"""
"saving" indicator consumed by the view.

Counts in-flight operations so overlapping saves keep it on until the last one
finishes. Listeners get the new boolean on every on/off edge.
"""
from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, List

Listener = Callable[[bool], None]


class StatusSignal:
    def __init__(self) -> None:
        self._active = 0
        self._listeners: List[Listener] = []

    @property
    def saving(self) -> bool:
        return self._active > 0

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def begin(self) -> None:
        self._active += 1
        if self._active == 1:
            self._notify(True)

    def end(self) -> None:
        if self._active == 0:
            return
        self._active -= 1
        if self._active == 0:
            self._notify(False)

    @asynccontextmanager
    async def bracket(self) -> AsyncIterator[None]:
        self.begin()
        try:
            yield
        finally:
            self.end()

    def _notify(self, saving: bool) -> None:
        for listener in list(self._listeners):
            listener(saving)
