"""Audit event pipeline and log file lifecycle"""

from .dispatcher import Dispatcher
from .normalizer import EventNormalizer
from .reader import LogReader
from .registry import FileRegistry
from .retention import RetentionManager
from .rotation import RotationManager
from .scheduler import RetentionScheduler

__all__ = [
    "Dispatcher",
    "EventNormalizer",
    "FileRegistry",
    "LogReader",
    "RetentionManager",
    "RetentionScheduler",
    "RotationManager",
]
