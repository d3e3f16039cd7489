"""
Logger plumbing shared by the migrator, validator and orchestrator.

Components accept any object with leveled logging methods; when none is
given they log through loguru bound to the lesson_migration component.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from loguru import logger

COMPONENT = "lesson_migration"


@runtime_checkable
class StructuredLogger(Protocol):
    """Anything exposing leveled logging methods (loguru, stdlib, test doubles)."""

    def debug(self, message: str) -> Any: ...

    def info(self, message: str) -> Any: ...

    def warning(self, message: str) -> Any: ...

    def error(self, message: str) -> Any: ...


def default_logger() -> StructuredLogger:
    return logger.bind(component=COMPONENT)
