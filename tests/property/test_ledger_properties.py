"""
Property-based tests for ledger compensation.
"""

from unittest.mock import MagicMock

from hypothesis import given
from hypothesis import strategies as st

from clientsync.application.sync.ledger import DeleteSpreadsheetRow, OperationLedger
from clientsync.core.domain import Platform, RollbackStatus, SyncAction
from clientsync.core.ports import PlatformSet, SpreadsheetPort


# Each entry says whether that row's compensation fails.
ledgers = st.lists(st.booleans(), max_size=12)


def build(failures):
    spreadsheet = MagicMock(spec=SpreadsheetPort)
    failing_rows = {row for row, fails in enumerate(failures, start=1) if fails}

    def delete(row_number):
        if row_number in failing_rows:
            raise RuntimeError(f"row {row_number}")

    spreadsheet.delete.side_effect = delete
    hook = MagicMock()
    ledger = OperationLedger(
        PlatformSet(primary=MagicMock(), spreadsheet=spreadsheet, tracker=MagicMock()),
        on_rollback_failure=hook,
    )
    for row in range(1, len(failures) + 1):
        ledger.record(Platform.SPREADSHEET, SyncAction.CREATE, row, DeleteSpreadsheetRow(row))
    return ledger, spreadsheet, hook


class TestCompensationProperties:
    @given(ledgers)
    def test_every_step_undone_once_in_reverse(self, failures):
        ledger, spreadsheet, _ = build(failures)

        ledger.compensate()

        rows = [c.args[0] for c in spreadsheet.delete.call_args_list]
        assert rows == list(range(len(failures), 0, -1))

    @given(ledgers)
    def test_failures_are_isolated(self, failures):
        ledger, _, hook = build(failures)

        report = ledger.compensate()

        assert len(report.outcomes) == len(failures)
        assert len(report.failed) == sum(failures)
        assert len(report.rolled_back) == len(failures) - sum(failures)
        assert hook.call_count == sum(failures)
        assert report.success == (not any(failures))

    @given(ledgers)
    def test_outcomes_follow_compensation_order(self, failures):
        ledger, _, _ = build(failures)

        report = ledger.compensate()

        expected = [
            RollbackStatus.FAILED if fails else RollbackStatus.ROLLED_BACK
            for fails in reversed(failures)
        ]
        assert [o.status for o in report.outcomes] == expected
