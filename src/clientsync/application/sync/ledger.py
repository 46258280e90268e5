"""
Operation Ledger - Run-scoped record of completed saga steps.

Every successful adapter write appends a SyncOperation carrying a typed
Compensation. When a later step fails the ledger undoes the recorded steps
in strict reverse order, attempting each compensation exactly once and
isolating failures so one broken rollback never prevents the others.

Compensations are plain data (one dataclass per rollback path) and receive
the platform ports when they run, so each path can be exercised on its own.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any, ClassVar

from clientsync.core.domain.entities import ClientRecord
from clientsync.core.domain.enums import Platform, RollbackStatus, SyncAction
from clientsync.core.exceptions import RollbackFailure
from clientsync.core.ports.platforms import PlatformSet, TrackerItem
from clientsync.core.result import Err, Ok, Result


logger = logging.getLogger("OperationLedger")


# =============================================================================
# Compensations
# =============================================================================


@dataclass(frozen=True)
class Compensation(ABC):
    """Base for compensating actions."""

    platform: ClassVar[Platform]
    action: ClassVar[SyncAction]
    manual: ClassVar[bool] = False

    @property
    @abstractmethod
    def handle(self) -> str | int | None:
        """Correlation handle the compensation addresses."""

    @abstractmethod
    def apply(self, platforms: PlatformSet) -> Result[None, Exception]:
        """Run the compensation; failures are returned, never raised."""

    def describe(self) -> str:
        return f"{self.action.value} {self.platform.value} {self.handle}"


@dataclass(frozen=True)
class SoftDeletePrimary(Compensation):
    """Undo a primary create by archiving the record."""

    platform: ClassVar[Platform] = Platform.PRIMARY
    action: ClassVar[SyncAction] = SyncAction.DELETE

    primary_id: str

    @property
    def handle(self) -> str:
        return self.primary_id

    def apply(self, platforms: PlatformSet) -> Result[None, Exception]:
        return Result.try_call(lambda: platforms.primary.soft_delete(self.primary_id))


@dataclass(frozen=True)
class RestorePrimary(Compensation):
    """Undo a primary update by writing the previous version back."""

    platform: ClassVar[Platform] = Platform.PRIMARY
    action: ClassVar[SyncAction] = SyncAction.UPDATE

    client: ClientRecord

    @property
    def handle(self) -> str | None:
        return self.client.primary_id

    def apply(self, platforms: PlatformSet) -> Result[None, Exception]:
        if not self.client.primary_id:
            return Err(ValueError("cannot restore a client without primary_id"))
        return Result.try_call(
            lambda: platforms.primary.update(self.client.primary_id, self.client)
        )


@dataclass(frozen=True)
class DeleteSpreadsheetRow(Compensation):
    """Undo a spreadsheet create by deleting the row."""

    platform: ClassVar[Platform] = Platform.SPREADSHEET
    action: ClassVar[SyncAction] = SyncAction.DELETE

    row_number: int

    @property
    def handle(self) -> int:
        return self.row_number

    def apply(self, platforms: PlatformSet) -> Result[None, Exception]:
        return Result.try_call(lambda: platforms.spreadsheet.delete(self.row_number))


@dataclass(frozen=True)
class RestoreSpreadsheetRow(Compensation):
    """Undo a spreadsheet update by rewriting the previous version."""

    platform: ClassVar[Platform] = Platform.SPREADSHEET
    action: ClassVar[SyncAction] = SyncAction.UPDATE

    row_number: int
    client: ClientRecord

    @property
    def handle(self) -> int:
        return self.row_number

    def apply(self, platforms: PlatformSet) -> Result[None, Exception]:
        return Result.try_call(
            lambda: platforms.spreadsheet.update(self.row_number, self.client)
        )


@dataclass(frozen=True)
class ManualTrackerCleanup(Compensation):
    """
    The tracker offers no reliable permanent delete.

    Applying this only records that an operator must remove the page;
    it is never retried.
    """

    platform: ClassVar[Platform] = Platform.TRACKER
    action: ClassVar[SyncAction] = SyncAction.DELETE
    manual: ClassVar[bool] = True

    page_id: str

    @property
    def handle(self) -> str:
        return self.page_id

    def apply(self, platforms: PlatformSet) -> Result[None, Exception]:
        logger.warning(
            f"Manual cleanup required: delete tracker page {self.page_id}",
            extra={"platform": self.platform.value, "page_id": self.page_id},
        )
        return Ok(None)


@dataclass(frozen=True)
class RestoreTrackerNames(Compensation):
    """
    Undo a name propagation bundle.

    ``items`` hold the names from before the bundle ran. Every item is
    attempted even if an earlier one fails; any failure fails the bundle.
    """

    platform: ClassVar[Platform] = Platform.TRACKER
    action: ClassVar[SyncAction] = SyncAction.UPDATE

    items: tuple[TrackerItem, ...]

    @property
    def handle(self) -> str:
        return ",".join(item.page_id for item in self.items)

    def apply(self, platforms: PlatformSet) -> Result[None, Exception]:
        results = [
            Result.try_call(
                lambda item=item: platforms.tracker.rename_item(item.page_id, item.client_name),
                error_factory=lambda e, item=item: (item.page_id, e),
            )
            for item in self.items
        ]
        combined = Result.collect_all(results)
        if combined.is_ok():
            return Ok(None)
        failed = combined.unwrap_err()
        page_ids = ", ".join(page_id for page_id, _ in failed)
        return Err(
            RollbackFailure(
                f"Could not restore names on tracker pages: {page_ids}",
                platform=self.platform,
                action=self.action,
                handle=page_ids,
                cause=failed[0][1],
            )
        )


# =============================================================================
# Ledger entries and outcomes
# =============================================================================


@dataclass(frozen=True)
class SyncOperation:
    """A completed adapter write and the way to undo it."""

    platform: Platform
    action: SyncAction
    data: Any
    compensation: Compensation

    def describe(self) -> str:
        return f"{self.platform.value} {self.action.value}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "platform": self.platform.value,
            "action": self.action.value,
            "compensation": type(self.compensation).__name__,
            "handle": self.compensation.handle,
        }


@dataclass(frozen=True)
class RollbackOutcome:
    """What happened when one operation was compensated."""

    operation: SyncOperation
    status: RollbackStatus
    error: RollbackFailure | None = None

    def to_dict(self) -> dict[str, Any]:
        data = {
            **self.operation.to_dict(),
            "status": self.status.value,
        }
        if self.error is not None:
            data["error"] = str(self.error)
        return data


@dataclass(frozen=True)
class RollbackReport:
    """Result of compensating a whole ledger, in the order compensations ran."""

    outcomes: tuple[RollbackOutcome, ...] = ()

    @property
    def rolled_back(self) -> list[RollbackOutcome]:
        return [o for o in self.outcomes if o.status is RollbackStatus.ROLLED_BACK]

    @property
    def failed(self) -> list[RollbackOutcome]:
        return [o for o in self.outcomes if o.status is RollbackStatus.FAILED]

    @property
    def manual(self) -> list[RollbackOutcome]:
        return [o for o in self.outcomes if o.status is RollbackStatus.MANUAL]

    @property
    def needs_attention(self) -> list[RollbackOutcome]:
        return [o for o in self.outcomes if o.status.needs_attention]

    @property
    def success(self) -> bool:
        return not self.failed

    @property
    def summary(self) -> str:
        if not self.outcomes:
            return "Nothing to roll back"
        if self.success and not self.manual:
            return f"{len(self.rolled_back)} operations rolled back"
        return (
            f"{len(self.rolled_back)} rolled back, {len(self.failed)} failed, "
            f"{len(self.manual)} need manual cleanup"
        )


# =============================================================================
# Ledger
# =============================================================================


class OperationLedger:
    """
    Ordered, append-only list of SyncOperations for one saga run.

    The ledger is owned by exactly one run and is discarded when the run
    completes; it can be compensated at most once.
    """

    def __init__(
        self,
        platforms: PlatformSet,
        on_rollback_failure: Callable[[RollbackFailure], None] | None = None,
    ):
        """
        Initialize the ledger.

        Args:
            platforms: Ports handed to compensations when they run.
            on_rollback_failure: Called once per failed compensation (audit hook).
        """
        self.platforms = platforms
        self.on_rollback_failure = on_rollback_failure
        self._operations: list[SyncOperation] = []
        self._report: RollbackReport | None = None

    def append(self, operation: SyncOperation) -> SyncOperation:
        if self._report is not None:
            raise RuntimeError("Ledger already compensated")
        self._operations.append(operation)
        logger.debug(f"Recorded {operation.describe()} (undo: {operation.compensation.describe()})")
        return operation

    def record(
        self,
        platform: Platform,
        action: SyncAction,
        data: Any,
        compensation: Compensation,
    ) -> SyncOperation:
        return self.append(SyncOperation(platform, action, data, compensation))

    @property
    def operations(self) -> tuple[SyncOperation, ...]:
        return tuple(self._operations)

    @property
    def compensated(self) -> bool:
        return self._report is not None

    def __len__(self) -> int:
        return len(self._operations)

    def __iter__(self) -> Iterator[SyncOperation]:
        return iter(list(self._operations))

    def compensate(self) -> RollbackReport:
        """
        Undo every recorded operation in reverse order.

        Each compensation is attempted exactly once. Failures are logged at
        error level with manual-cleanup context and reported to the
        on_rollback_failure hook; they never raise.

        Returns:
            RollbackReport with one outcome per operation, in the order the
            compensations ran (newest operation first).
        """
        if self._report is not None:
            raise RuntimeError("Ledger already compensated")

        if self._operations:
            logger.info(f"Rolling back {len(self._operations)} operations...")

        outcomes = [self._compensate_one(op) for op in reversed(self._operations)]
        self._report = RollbackReport(outcomes=tuple(outcomes))

        if outcomes:
            logger.info(f"Rollback finished: {self._report.summary}")
        return self._report

    def _compensate_one(self, operation: SyncOperation) -> RollbackOutcome:
        compensation = operation.compensation
        logger.info(f"Reverting {operation.describe()} ({compensation.describe()})")

        result = compensation.apply(self.platforms)
        if result.is_ok():
            status = RollbackStatus.MANUAL if compensation.manual else RollbackStatus.ROLLED_BACK
            return RollbackOutcome(operation=operation, status=status)

        error = result.unwrap_err()
        failure = (
            error
            if isinstance(error, RollbackFailure)
            else RollbackFailure(
                f"Rollback of {operation.describe()} failed",
                platform=operation.platform,
                action=compensation.action,
                handle=compensation.handle,
                cause=error,
            )
        )
        logger.error(
            f"Rollback failed for {operation.platform.value}: {failure}",
            extra={
                "platform": operation.platform.value,
                "handle": failure.handle,
                "manual_cleanup_required": True,
            },
        )
        if self.on_rollback_failure is not None:
            self.on_rollback_failure(failure)
        return RollbackOutcome(operation=operation, status=RollbackStatus.FAILED, error=failure)


__all__ = [
    "Compensation",
    "DeleteSpreadsheetRow",
    "ManualTrackerCleanup",
    "OperationLedger",
    "RestorePrimary",
    "RestoreSpreadsheetRow",
    "RestoreTrackerNames",
    "RollbackOutcome",
    "RollbackReport",
    "SoftDeletePrimary",
    "SyncOperation",
]
