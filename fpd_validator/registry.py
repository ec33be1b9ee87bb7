"""Registration of first-party-data processing submodules.

A host pipeline looks up every submodule registered under a kind (e.g.
``"firstPartyData"``) and calls their ``process_fpd`` hooks in ascending
``queue`` order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FpdSubmodule:
    """A named processing hook with an ordering slot."""

    name: str
    queue: int
    process_fpd: Callable[..., Any]


_submodules: Dict[str, List[FpdSubmodule]] = {}


def submodule(kind: str, module: FpdSubmodule) -> None:
    """Register *module* under *kind*, replacing one with the same name."""
    entries = [m for m in _submodules.get(kind, []) if m.name != module.name]
    entries.append(module)
    _submodules[kind] = entries
    logger.debug("submodule_registered", kind=kind, name=module.name, queue=module.queue)


def get_submodules(kind: str) -> List[FpdSubmodule]:
    """Return the submodules registered under *kind*, ordered by queue."""
    return sorted(_submodules.get(kind, []), key=lambda m: m.queue)
