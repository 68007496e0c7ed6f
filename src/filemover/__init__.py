"""
filemover: Move files between directories with integrity verification.

This package copies every file of a source directory into a destination
directory, verifies each copy byte-for-byte, renames the copy when the name
is already taken and deletes the source file afterwards.
"""

from .logging_setup import MonthlyRotatingFileHandler, setup_logging, shutdown_logging
from .main import (
    CollisionResolutionExhausted,
    FileMoverError,
    TransferConfig,
    TransferEngine,
    TransferOutcome,
    TransferResult,
    UsageError,
    main,
)

__version__ = "1.0.0"
__author__ = "filemover project"
__description__ = "Move files between directories with integrity verification"

__all__ = [
    "CollisionResolutionExhausted",
    "FileMoverError",
    "MonthlyRotatingFileHandler",
    "TransferConfig",
    "TransferEngine",
    "TransferOutcome",
    "TransferResult",
    "UsageError",
    "main",
    "setup_logging",
    "shutdown_logging",
]
