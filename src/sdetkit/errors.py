"""Error taxonomy shared by the retry, timeout, config and parsing helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class ErrorCode(IntEnum):
    RUNTIME_ERROR = 1
    CONFIG_ERROR = 2
    CANCELLED = 3
    FORMAT_ERROR = 4


@dataclass
class SdetKitError(Exception):
    message: str
    code: ErrorCode = ErrorCode.RUNTIME_ERROR
    hint: str = ""

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} Hint: {self.hint}"
        return self.message


@dataclass
class ConfigurationError(SdetKitError, ValueError):
    """Invalid arguments handed to a primitive; never retried."""

    code: ErrorCode = ErrorCode.CONFIG_ERROR


@dataclass
class OperationCancelled(SdetKitError):
    """Cooperative cancellation observed at a checkpoint."""

    code: ErrorCode = ErrorCode.CANCELLED


@dataclass
class LogFormatError(SdetKitError, ValueError):
    line: str = ""
    code: ErrorCode = ErrorCode.FORMAT_ERROR
