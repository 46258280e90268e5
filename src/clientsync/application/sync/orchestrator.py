"""
Sync Orchestrator - Coordinates client writes across the three platforms.

This is the main entry point for sync operations. None of the platforms
share a transaction, so each workflow runs as a saga: adapter calls happen
in a fixed order, every success is recorded in an OperationLedger, and any
failure compensates the recorded steps in reverse order before the result
is returned.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any

from clientsync.core.domain.entities import ClientRecord, detect_changes, touches_identity
from clientsync.core.domain.enums import Platform, Resolution, SyncAction, WorkflowKind
from clientsync.core.exceptions import (
    AdapterWriteError,
    AggregateValidationError,
    ClientSyncError,
    ConflictAmbiguous,
    MissingCorrelationDataError,
    RollbackFailure,
    RowNotFoundError,
    SyncCancelledError,
    ValidationError,
)
from clientsync.core.ports.audit_sink import AuditRecord, AuditSinkPort
from clientsync.core.ports.config_provider import SyncConfig
from clientsync.core.ports.platforms import (
    PlatformSet,
    PrimaryStorePort,
    ProjectTrackerPort,
    SpreadsheetPort,
    TrackerItem,
)

from .conflict import ConflictResolver
from .execution import call_with_timeout, check_cancelled
from .ledger import (
    DeleteSpreadsheetRow,
    ManualTrackerCleanup,
    OperationLedger,
    RestorePrimary,
    RestoreSpreadsheetRow,
    RestoreTrackerNames,
    RollbackOutcome,
    RollbackReport,
    SoftDeletePrimary,
    SyncOperation,
)
from .validation import validate_client


@dataclass(frozen=True)
class FailedOperation:
    """
    The step that raised and ended a workflow.

    ``action`` is None for reads (spreadsheet row lookup, client matching).
    """

    platform: Platform | None
    action: SyncAction | None
    error: str

    def __str__(self) -> str:
        platform = self.platform.value if self.platform else "orchestrator"
        action = self.action.value if self.action else "read"
        return f"[{platform} {action}] {self.error}"


@dataclass(frozen=True)
class SyncResult:
    """
    Outcome of one workflow invocation.

    On failure ``completed_operations`` lists the steps that had succeeded
    before the failure; ``rollback`` says which of them were undone and
    which need an operator.

    Attributes:
        success: Whether the workflow completed.
        workflow: Which workflow produced this result.
        completed_operations: Ledger entries, in execution order.
        failed_operation: The step that raised, if any.
        error: The original failure; never a rollback error.
        rollback: Compensation report when a failure triggered rollback.
        resolution: Reconcile only - which direction was written.
        client: The client as the app now knows it.
        changes: Update only - the replicated fields that changed.
        warnings: Non-fatal problems (e.g. ambiguous conflicts).
    """

    success: bool
    workflow: WorkflowKind
    completed_operations: tuple[SyncOperation, ...] = ()
    failed_operation: FailedOperation | None = None
    error: ClientSyncError | None = None
    rollback: RollbackReport | None = None
    resolution: Resolution | None = None
    client: ClientRecord | None = None
    changes: dict[str, Any] = field(default_factory=dict)
    warnings: tuple[str, ...] = ()

    @property
    def rolled_back_count(self) -> int:
        return len(self.rollback.rolled_back) if self.rollback else 0

    @property
    def manual_attention(self) -> list[RollbackOutcome]:
        """Compensations that failed or that only an operator can perform."""
        return self.rollback.needs_attention if self.rollback else []

    def summary(self) -> str:
        """
        Generate a human-readable summary of the result.

        Returns:
            Multi-line summary string.
        """
        lines = []
        name = self.workflow.value

        if self.success:
            lines.append(f"✓ {name} workflow completed")
        else:
            lines.append(f"✗ {name} workflow failed: {self.error}")

        lines.append(f"  Operations completed: {len(self.completed_operations)}")
        if self.resolution is not None:
            lines.append(f"  Resolution: {self.resolution.value}")
        if self.failed_operation is not None:
            lines.append(f"  Failed step: {self.failed_operation}")
        if self.rollback is not None:
            lines.append(f"  Rolled back: {self.rolled_back_count}")
            lines.append(f"  Manual attention: {len(self.manual_attention)}")
            for outcome in self.manual_attention:
                compensation = outcome.operation.compensation
                lines.append(
                    f"    • {outcome.status.value}: {outcome.operation.platform.value} "
                    f"{compensation.handle}"
                )
        for warning in self.warnings:
            lines.append(f"  ⚠ {warning}")

        return "\n".join(lines)

    def to_audit_metadata(self) -> dict[str, Any]:
        client = self.client
        metadata: dict[str, Any] = {
            "client_id": client.primary_id if client else None,
            "row": client.spreadsheet_row if client else None,
            "operations": [op.to_dict() for op in self.completed_operations],
        }
        if self.changes:
            metadata["changes"] = sorted(self.changes)
        if self.resolution is not None:
            metadata["resolution"] = self.resolution.value
        if self.error is not None:
            metadata["error"] = str(self.error)
        if self.failed_operation is not None:
            metadata["failed_step"] = str(self.failed_operation)
        if self.rollback is not None:
            metadata["rolled_back"] = self.rolled_back_count
            metadata["manual_cleanup"] = [o.to_dict() for o in self.manual_attention]
        if self.warnings:
            metadata["warnings"] = list(self.warnings)
        return metadata


class _SagaRun:
    """State of one workflow invocation: its ledger and the step in flight."""

    def __init__(
        self,
        ledger: OperationLedger,
        timeout: float | None,
        cancel_event: threading.Event | None,
    ):
        self.ledger = ledger
        self.timeout = timeout
        self.cancel_event = cancel_event
        self.step: tuple[Platform | None, SyncAction | None] = (None, None)

    def call(
        self,
        platform: Platform,
        action: SyncAction | None,
        fn: Callable[..., Any],
        *args: Any,
    ) -> Any:
        """
        Run one adapter call under the timeout.

        Foreign exceptions are wrapped in AdapterWriteError carrying the
        platform and action.
        """
        label = f"{platform.value} {action.value if action else 'read'}"
        check_cancelled(self.cancel_event, label)
        self.step = (platform, action)
        try:
            return call_with_timeout(lambda: fn(*args), self.timeout, platform, action)
        except ClientSyncError:
            raise
        except Exception as e:
            raise AdapterWriteError(
                f"{platform.display_name} {action.value if action else 'read'} failed",
                platform=platform,
                action=action,
                cause=e,
            ) from e


class SyncOrchestrator:
    """
    Saga controller for client records.

    Workflows:
    - create_client_workflow: primary → spreadsheet → primary (row) →
      tracker → spreadsheet (tracker link)
    - update_client_workflow: primary → spreadsheet → tracker names
    - reconcile_inbound: one directional write decided by the resolver

    Concurrent workflows for the same client must be serialized by the
    caller (see EntityLockRegistry).
    """

    def __init__(
        self,
        primary: PrimaryStorePort,
        spreadsheet: SpreadsheetPort,
        tracker: ProjectTrackerPort,
        config: SyncConfig | None = None,
        audit_sink: AuditSinkPort | None = None,
        resolver: ConflictResolver | None = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            primary: Primary store port
            spreadsheet: Spreadsheet port
            tracker: Project tracker port
            config: Sync configuration (timeouts, drift window, audit actor)
            audit_sink: Optional destination for audit records
            resolver: Optional conflict resolver; built from config if omitted
        """
        self.primary = primary
        self.spreadsheet = spreadsheet
        self.tracker = tracker
        self.platforms = PlatformSet(primary=primary, spreadsheet=spreadsheet, tracker=tracker)
        self.config = config or SyncConfig()
        self.audit_sink = audit_sink
        self.resolver = resolver or ConflictResolver(self.config.drift_tolerance_ms)
        self.logger = logging.getLogger("SyncOrchestrator")

    # -------------------------------------------------------------------------
    # Main Entry Points
    # -------------------------------------------------------------------------

    def create_client_workflow(
        self,
        client: ClientRecord,
        cancel_event: threading.Event | None = None,
    ) -> SyncResult:
        """
        Create a client on every platform.

        Args:
            client: The client to create (handles unset)
            cancel_event: Set by the caller to abort; completed steps are
                compensated and SyncCancelledError is raised.

        Returns:
            SyncResult; on success it carries four operations.
        """
        errors = validate_client(client)
        if errors:
            return self._reject(WorkflowKind.CREATE, client, errors)

        def steps(saga: _SagaRun) -> dict[str, Any]:
            self.logger.info(f"Creating client '{client.display_name}' in primary store...")
            receipt = saga.call(Platform.PRIMARY, SyncAction.CREATE, self.primary.create, client)
            primary_id = self._require(receipt.id, Platform.PRIMARY, SyncAction.CREATE, "primary_id")
            saved = client.with_handles(primary_id=primary_id)
            saga.ledger.record(
                Platform.PRIMARY, SyncAction.CREATE, saved, SoftDeletePrimary(primary_id)
            )

            self.logger.info("Adding client to spreadsheet...")
            receipt = saga.call(
                Platform.SPREADSHEET, SyncAction.CREATE, self.spreadsheet.create, saved
            )
            row = receipt.row_number
            if row is None or row < 1:
                raise MissingCorrelationDataError(
                    "Spreadsheet reported success without a row number",
                    platform=Platform.SPREADSHEET,
                    action=SyncAction.CREATE,
                    handle="spreadsheet_row",
                )
            saga.ledger.record(
                Platform.SPREADSHEET,
                SyncAction.CREATE,
                {"client": saved, "row_number": row},
                DeleteSpreadsheetRow(row),
            )

            with_row = saved.with_handles(spreadsheet_row=row)
            saga.call(Platform.PRIMARY, SyncAction.UPDATE, self.primary.update, primary_id, with_row)
            saga.ledger.record(
                Platform.PRIMARY, SyncAction.UPDATE, with_row, RestorePrimary(saved)
            )

            self.logger.info("Creating linked tracker item...")
            receipt = saga.call(
                Platform.TRACKER, SyncAction.CREATE, self.tracker.create_linked_item, with_row
            )
            page_id = self._require(receipt.id, Platform.TRACKER, SyncAction.CREATE, "tracker_page_id")
            linked = replace(
                with_row,
                tracker_page_id=page_id,
                tracker_project_url=receipt.url or self.tracker_url(page_id),
            )
            saga.ledger.record(
                Platform.TRACKER, SyncAction.CREATE, receipt, ManualTrackerCleanup(page_id)
            )

            self.logger.info("Linking tracker item into spreadsheet row...")
            saga.call(Platform.SPREADSHEET, SyncAction.UPDATE, self.spreadsheet.update, row, linked)

            return {"client": linked}

        return self._run(WorkflowKind.CREATE, steps, cancel_event, client=client)

    def update_client_workflow(
        self,
        old: ClientRecord,
        new: ClientRecord,
        cancel_event: threading.Event | None = None,
    ) -> SyncResult:
        """
        Push an edited client to every platform that holds it.

        Nothing is written when no replicated field changed.

        Args:
            old: The client as currently stored
            new: The edited client
            cancel_event: See create_client_workflow
        """
        changes = detect_changes(old, new)
        if not changes:
            self.logger.info("No changes detected, skipping sync")
            result = SyncResult(success=True, workflow=WorkflowKind.UPDATE, client=new)
            self._audit_completion(result)
            return result

        if not new.primary_id:
            return self._reject(
                WorkflowKind.UPDATE,
                new,
                [ValidationError("primary_id", "Client has no primary id")],
            )

        self.logger.info(f"Changes detected: {sorted(changes)}")
        previous = old.with_handles(primary_id=new.primary_id)

        def steps(saga: _SagaRun) -> dict[str, Any]:
            saga.call(Platform.PRIMARY, SyncAction.UPDATE, self.primary.update, new.primary_id, new)
            saga.ledger.record(Platform.PRIMARY, SyncAction.UPDATE, new, RestorePrimary(previous))

            if new.spreadsheet_row:
                row = new.spreadsheet_row
                saga.call(Platform.SPREADSHEET, SyncAction.UPDATE, self.spreadsheet.update, row, new)
                saga.ledger.record(
                    Platform.SPREADSHEET,
                    SyncAction.UPDATE,
                    new,
                    RestoreSpreadsheetRow(row, previous),
                )

            if touches_identity(changes):
                self._propagate_name(saga, new)

            return {"client": new}

        return self._run(WorkflowKind.UPDATE, steps, cancel_event, client=new, changes=changes)

    def reconcile_inbound(
        self,
        row_number: int,
        cancel_event: threading.Event | None = None,
    ) -> SyncResult:
        """
        Reconcile an external edit to a spreadsheet row.

        Unknown rows are imported into the primary store. Known rows are
        resolved last-writer-wins with the configured drift window; at most
        one write is made, so there is nothing to roll back.

        Args:
            row_number: The edited row
            cancel_event: See create_client_workflow
        """

        def steps(saga: _SagaRun) -> dict[str, Any]:
            self.logger.info(f"Processing spreadsheet change for row {row_number}")
            sheet = saga.call(Platform.SPREADSHEET, None, self.spreadsheet.read, row_number)
            if sheet is None:
                raise RowNotFoundError(row_number, platform=Platform.SPREADSHEET)
            if sheet.spreadsheet_row != row_number:
                sheet = replace(sheet, spreadsheet_row=row_number)

            app = self._match(saga, sheet)
            if app is None:
                self.logger.info("New client detected in spreadsheet, importing...")
                receipt = saga.call(Platform.PRIMARY, SyncAction.CREATE, self.primary.create, sheet)
                return {
                    "client": sheet.with_handles(primary_id=receipt.id),
                    "resolution": Resolution.IMPORTED,
                }

            decision = self.resolver.resolve(app, sheet)

            if decision.resolution is Resolution.SHEET_WINS:
                self.logger.info("Spreadsheet version is newer, updating primary store...")
                if not app.primary_id:
                    raise MissingCorrelationDataError(
                        "Matched client has no primary id",
                        platform=Platform.PRIMARY,
                        action=SyncAction.UPDATE,
                        handle="primary_id",
                    )
                merged = self.resolver.merge_sheet_into_app(app, sheet)
                saga.call(Platform.PRIMARY, SyncAction.UPDATE, self.primary.update, app.primary_id, merged)
                return {"client": merged, "resolution": decision.resolution}

            if decision.resolution is Resolution.APP_WINS:
                self.logger.info("App version is newer, updating spreadsheet...")
                saga.call(Platform.SPREADSHEET, SyncAction.UPDATE, self.spreadsheet.update, row_number, app)
                return {"client": app, "resolution": decision.resolution}

            if decision.resolution is Resolution.AMBIGUOUS:
                conflict = ConflictAmbiguous(
                    row_number,
                    decision.app_timestamp,
                    decision.sheet_timestamp,
                    self.resolver.drift_tolerance_ms,
                )
                self.logger.warning(str(conflict), extra={"row": row_number})
                return {
                    "client": app,
                    "resolution": decision.resolution,
                    "warnings": (str(conflict),),
                }

            self.logger.info("Versions synchronized, no action")
            return {"client": app, "resolution": decision.resolution}

        return self._run(WorkflowKind.RECONCILE, steps, cancel_event)

    def tracker_url(self, page_id: str) -> str:
        """Public URL of a tracker page when the tracker does not return one."""
        return f"{self.config.tracker_base_url.rstrip('/')}/{page_id.replace('-', '')}"

    # -------------------------------------------------------------------------
    # Saga plumbing
    # -------------------------------------------------------------------------

    def _run(
        self,
        workflow: WorkflowKind,
        steps: Callable[[_SagaRun], dict[str, Any]],
        cancel_event: threading.Event | None,
        **defaults: Any,
    ) -> SyncResult:
        ledger = OperationLedger(
            self.platforms,
            on_rollback_failure=lambda failure: self._audit_rollback_failure(workflow, failure),
        )
        saga = _SagaRun(ledger, self.config.adapter_timeout, cancel_event)

        try:
            fields = steps(saga)
        except SyncCancelledError as e:
            self._abort(workflow, saga, e, defaults)
            raise
        except ClientSyncError as e:
            return self._abort(workflow, saga, e, defaults)
        except BaseException:
            self.logger.error(f"{workflow.value} workflow interrupted, rolling back...")
            ledger.compensate()
            raise

        result = SyncResult(
            success=True,
            workflow=workflow,
            completed_operations=ledger.operations,
            **{**defaults, **fields},
        )
        self.logger.info(f"✅ {workflow.value} workflow completed successfully")
        self._audit_completion(result)
        return result

    def _abort(
        self,
        workflow: WorkflowKind,
        saga: _SagaRun,
        error: ClientSyncError,
        defaults: dict[str, Any],
    ) -> SyncResult:
        self.logger.error(f"❌ {workflow.value} workflow failed, rolling back... ({error})")
        report = saga.ledger.compensate()
        platform, action = saga.step
        if isinstance(error, AdapterWriteError):
            platform = error.platform or platform
            action = error.action or action

        result = SyncResult(
            success=False,
            workflow=workflow,
            completed_operations=saga.ledger.operations,
            failed_operation=FailedOperation(platform=platform, action=action, error=str(error)),
            error=error,
            rollback=report,
            **defaults,
        )
        self._audit_completion(result)
        return result

    def _reject(
        self,
        workflow: WorkflowKind,
        client: ClientRecord,
        errors: list[ValidationError],
    ) -> SyncResult:
        error = AggregateValidationError(errors)
        self.logger.warning(f"{workflow.value} workflow rejected: {error}")
        result = SyncResult(success=False, workflow=workflow, error=error, client=client)
        self._audit_completion(result, level="warn")
        return result

    @staticmethod
    def _require(value: str | None, platform: Platform, action: SyncAction, handle: str) -> str:
        if not value:
            raise MissingCorrelationDataError(
                f"{platform.display_name} reported success without a {handle}",
                platform=platform,
                action=action,
                handle=handle,
            )
        return value

    def _match(self, saga: _SagaRun, sheet: ClientRecord) -> ClientRecord | None:
        """Find the app-side client by row, then by exact email."""
        app = saga.call(
            Platform.PRIMARY, None, self.primary.find_by_spreadsheet_row, sheet.spreadsheet_row
        )
        if app is None and sheet.email:
            app = saga.call(Platform.PRIMARY, None, self.primary.find_by_email, sheet.email)
        return app

    def _propagate_name(self, saga: _SagaRun, new: ClientRecord) -> None:
        """
        Push the new display name to every linked tracker item as one bundle.

        The bundle is ledgered as one operation. If item k fails, only the
        items renamed before it are ledgered, so rollback restores exactly
        those names first.
        """
        items: list[TrackerItem] = saga.call(
            Platform.TRACKER, None, self.tracker.list_linked_items, new.primary_id
        )
        if not items:
            return

        renamed: list[TrackerItem] = []
        try:
            for item in items:
                saga.call(
                    Platform.TRACKER,
                    SyncAction.UPDATE,
                    self.tracker.rename_item,
                    item.page_id,
                    new.display_name,
                )
                renamed.append(item)
        except BaseException:
            if renamed:
                self.logger.warning(
                    f"Name propagation failed after {len(renamed)} of {len(items)} items"
                )
                saga.ledger.record(
                    Platform.TRACKER,
                    SyncAction.UPDATE,
                    {
                        "items": [item.page_id for item in renamed],
                        "client_name": new.display_name,
                        "partial": True,
                    },
                    RestoreTrackerNames(tuple(renamed)),
                )
            raise

        saga.ledger.record(
            Platform.TRACKER,
            SyncAction.UPDATE,
            {"items": [item.page_id for item in items], "client_name": new.display_name},
            RestoreTrackerNames(tuple(items)),
        )

    # -------------------------------------------------------------------------
    # Audit
    # -------------------------------------------------------------------------

    def _audit_completion(self, result: SyncResult, level: str | None = None) -> None:
        if level is None:
            if not result.success:
                level = "error"
            elif result.warnings:
                level = "warn"
            else:
                level = "info"
        self._emit(
            AuditRecord(
                action=result.workflow.audit_action,
                level=level,
                metadata=result.to_audit_metadata(),
                actor_id=self.config.actor_id,
                actor_name=self.config.actor_name,
            )
        )

    def _audit_rollback_failure(self, workflow: WorkflowKind, failure: RollbackFailure) -> None:
        self._emit(
            AuditRecord(
                action="ROLLBACK_FAILED",
                level="error",
                metadata={
                    "workflow": workflow.value,
                    "platform": failure.platform.value if failure.platform else None,
                    "action": failure.action.value if failure.action else None,
                    "handle": failure.handle,
                    "error": str(failure),
                    "manual_cleanup_required": True,
                },
                actor_id=self.config.actor_id,
                actor_name=self.config.actor_name,
            )
        )

    def _emit(self, record: AuditRecord) -> None:
        """Hand a record to the sink; sink failures never reach the workflow."""
        if self.audit_sink is None:
            return
        try:
            self.audit_sink.append(record)
        except Exception as e:
            self.logger.warning(f"Audit sink failed for {record.action}: {e}")
