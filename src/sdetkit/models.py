"""Shared test-run value objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class TestStatus(str, Enum):
    __test__ = False

    PASS = "PASS"
    FAIL = "FAIL"

    @classmethod
    def parse(cls, value: str | None) -> TestStatus | None:
        if value is None:
            return None
        normalized = value.strip().upper()
        for member in cls:
            if member.value == normalized:
                return member
        return None


@dataclass(frozen=True)
class Outcome:
    """Result of a single work attempt: ``Pass`` or ``Fail(reason)``."""

    status: TestStatus
    reason: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", TestStatus(self.status))
        if self.status is TestStatus.FAIL and self.reason is None:
            raise ValueError("A failed outcome requires a reason.")
        if self.status is TestStatus.PASS and self.reason is not None:
            raise ValueError("A passing outcome cannot carry a reason.")

    @classmethod
    def success(cls) -> Outcome:
        return cls(TestStatus.PASS)

    @classmethod
    def failure(cls, reason: str) -> Outcome:
        return cls(TestStatus.FAIL, reason)

    @property
    def is_pass(self) -> bool:
        return self.status is TestStatus.PASS

    @property
    def is_fail(self) -> bool:
        return self.status is TestStatus.FAIL

    def __str__(self) -> str:
        if self.is_pass:
            return "Pass"
        return f"Fail({self.reason})"


@dataclass(frozen=True)
class AttemptRecord:
    attempt: int
    outcome: Outcome
    delay_before: float = 0.0


@dataclass(frozen=True, eq=False)
class TestId:
    """Suite/test identity compared case-insensitively."""

    __test__ = False

    suite: str
    name: str
    _folded: tuple[str, str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_folded", (self.suite.casefold(), self.name.casefold()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TestId):
            return NotImplemented
        return self._folded == other._folded

    def __hash__(self) -> int:
        return hash(self._folded)

    @property
    def key(self) -> str:
        return result_key(self.suite, self.name)


def result_key(suite: str, test: str) -> str:
    return f"{suite}|{test}"


@dataclass(frozen=True)
class TestResult:
    __test__ = False

    suite: str
    test: str
    status: str

    @property
    def key(self) -> str:
        return result_key(self.suite, self.test)

    @property
    def test_id(self) -> TestId:
        return TestId(self.suite, self.test)

    @property
    def is_pass(self) -> bool:
        return TestStatus.parse(self.status) is TestStatus.PASS

    @property
    def is_fail(self) -> bool:
        return TestStatus.parse(self.status) is TestStatus.FAIL
