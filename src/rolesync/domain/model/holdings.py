"""Holdings snapshots returned by the external data source."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class HoldingsSnapshot:
    owned: tuple[int, ...] = ()
    staked: tuple[int, ...] = ()


EMPTY_SNAPSHOT = HoldingsSnapshot()


@dataclass(frozen=True, slots=True)
class FetchError:
    """Why a holdings query produced no usable snapshot."""

    message: str
    status_code: int | None = None


@dataclass(frozen=True, slots=True)
class HoldingsResult:
    """Either a snapshot or the error that prevented one."""

    snapshot: HoldingsSnapshot | None = None
    error: FetchError | None = None

    def __post_init__(self) -> None:
        if (self.snapshot is None) == (self.error is None):
            raise ValueError("HoldingsResult needs exactly one of snapshot or error")

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, snapshot: HoldingsSnapshot) -> HoldingsResult:
        return cls(snapshot=snapshot)

    @classmethod
    def failure(cls, message: str, *, status_code: int | None = None) -> HoldingsResult:
        return cls(error=FetchError(message=message, status_code=status_code))
