from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum


class Outcome(str, Enum):
    PLATFORM_API_KEY_MISSING = "PLATFORM_API_KEY_MISSING"
    ACCOUNT_NOT_RETRIEVABLE = "ACCOUNT_NOT_RETRIEVABLE"
    NO_FIX_NEEDED = "NO_FIX_NEEDED"
    ACCOUNT_NOT_UPDATABLE = "ACCOUNT_NOT_UPDATABLE"
    FIXED = "FIXED"

    @property
    def is_failure(self) -> bool:
        return self not in (Outcome.NO_FIX_NEEDED, Outcome.FIXED)


@dataclass(frozen=True)
class AccountRecord:
    connected_account_id: str
    platform_account_id: str


@dataclass(frozen=True)
class ResultRecord:
    platform_account_id: str
    connected_account_id: str
    result: Outcome


@dataclass(frozen=True)
class RemoteAccountState:
    account_id: str
    mcc: str | None
    metadata: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class BatchResult:
    total_records: int
    counts: dict[Outcome, int]
    results_path: str
    results: list[ResultRecord]

    @property
    def failed_records(self) -> int:
        return sum(count for outcome, count in self.counts.items() if outcome.is_failure)
