"""Application layer - use cases and orchestration."""

from .commands import PackJobCommand, PackJobOutput

__all__ = [
    "PackJobCommand",
    "PackJobOutput",
]
