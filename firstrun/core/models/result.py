"""
Outcome and OperationResult — the execution contract.

Every action returns exactly one Outcome. The batch executor files the
entry's display name into the matching bucket of an OperationResult.
Buckets are append-only: results from several batches are merged by
concatenation, never by deduplication.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Outcome(str, Enum):
    """Classification of a single catalog entry after processing."""

    SUCCESS = "Success"
    FAILED = "Failed"
    SKIPPED = "Skipped"


class InstallSignal(str, Enum):
    """Translated result of one package-manager install call.

    Adapters map raw exit codes onto these values so that nothing
    above the adapter layer inspects process exit codes directly.
    """

    SUCCEEDED = "succeeded"
    ALREADY_INSTALLED = "already_installed"
    HASH_MISMATCH = "hash_mismatch"
    FAILED = "failed"


@dataclass
class OperationResult:
    """Three ordered buckets of entry names: Success, Failed, Skipped."""

    success: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    def record(self, name: str, outcome: Outcome) -> None:
        """Append ``name`` to the bucket matching ``outcome``."""
        self.bucket(outcome).append(name)

    def bucket(self, outcome: Outcome) -> list[str]:
        if outcome is Outcome.SUCCESS:
            return self.success
        if outcome is Outcome.FAILED:
            return self.failed
        return self.skipped

    def merge(self, other: OperationResult) -> OperationResult:
        """Return a new result with every bucket of ``other`` appended."""
        return OperationResult(
            success=[*self.success, *other.success],
            failed=[*self.failed, *other.failed],
            skipped=[*self.skipped, *other.skipped],
        )

    @classmethod
    def combine(cls, results: list[OperationResult]) -> OperationResult:
        """Merge any number of results in order."""
        merged = cls()
        for result in results:
            merged = merged.merge(result)
        return merged

    @property
    def total(self) -> int:
        return len(self.success) + len(self.failed) + len(self.skipped)

    @property
    def all_ok(self) -> bool:
        return not self.failed

    @property
    def status(self) -> str:
        if not self.failed:
            return "ok"
        if self.success:
            return "partial"
        return "failed"

    def to_dict(self) -> dict[str, list[str]]:
        return {
            Outcome.SUCCESS.value: list(self.success),
            Outcome.FAILED.value: list(self.failed),
            Outcome.SKIPPED.value: list(self.skipped),
        }
