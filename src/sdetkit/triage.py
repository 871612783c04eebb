"""Failure deduplication by exact signature."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

Signature = tuple[str, str, str, str]


@dataclass(frozen=True)
class Failure:
    suite: str
    test: str
    reason: str
    stack: str

    @property
    def signature(self) -> Signature:
        return (self.suite, self.test, self.reason, self.stack)


@dataclass(frozen=True)
class FailureGroup:
    signature: Signature
    failures: tuple[Failure, ...]

    @property
    def count(self) -> int:
        return len(self.failures)

    @property
    def label(self) -> str:
        return "|".join(self.signature)


def group_by_signature(failures: Iterable[Failure]) -> list[FailureGroup]:
    """Bucket identical failures, largest bucket first.

    Buckets of equal size keep the order in which their signature first appeared.
    """
    buckets: dict[Signature, list[Failure]] = {}
    for failure in failures:
        buckets.setdefault(failure.signature, []).append(failure)
    groups = [FailureGroup(signature=sig, failures=tuple(items)) for sig, items in buckets.items()]
    groups.sort(key=lambda group: group.count, reverse=True)
    return groups
