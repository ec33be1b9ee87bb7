"""Diagnostic sinks for rejected fields and array elements.

A sink is any callable accepting one human-readable line.  Emission is
fire-and-forget: sinks never influence what the filters keep.
"""

from __future__ import annotations

from typing import Callable, Iterator, List, Optional

import structlog

logger = structlog.get_logger(__name__)

DiagnosticSink = Callable[[str], None]


def log_sink(message: str) -> None:
    """Default sink: one structlog warning per diagnostic."""
    logger.warning("fpd_filtered", detail=message)


class DiagnosticCollector:
    """Keeps every diagnostic in memory, optionally forwarding each one."""

    def __init__(self, forward: Optional[DiagnosticSink] = None) -> None:
        self._forward = forward
        self.messages: List[str] = []

    def __call__(self, message: str) -> None:
        self.messages.append(message)
        if self._forward is not None:
            self._forward(message)

    def __len__(self) -> int:
        return len(self.messages)

    def __iter__(self) -> Iterator[str]:
        return iter(self.messages)

    def matching(self, fragment: str) -> List[str]:
        """Return the collected lines containing *fragment*."""
        return [m for m in self.messages if fragment in m]
