"""
Output - Console output formatting.

Provides pretty-printed output with colors and formatting.
"""

import json
import sys

from clientsync.application.sync import SyncResult
from clientsync.core.ports.audit_sink import AuditRecord


class Colors:
    """
    ANSI color codes for terminal output.

    Attributes:
        RESET: Reset all formatting to default.
        BOLD: Make text bold.
        DIM: Make text dimmed/faded.
        RED: Red text color.
        GREEN: Green text color.
        YELLOW: Yellow text color.
        BLUE: Blue text color.
        CYAN: Cyan text color.
    """

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"


class Symbols:
    """Unicode symbols for terminal output."""

    CHECK = "✓"
    CROSS = "✗"
    ARROW = "→"
    DOT = "•"
    WARN = "⚠"
    INFO = "ℹ"

    BOX_H = "─"


LEVEL_COLORS = {
    "debug": Colors.DIM,
    "info": Colors.CYAN,
    "warn": Colors.YELLOW,
    "error": Colors.RED,
}


class Console:
    """
    Console output helper with colors and formatting.

    Attributes:
        color: Whether to use ANSI color codes.
        verbose: Whether to print debug messages.
        quiet: Whether to suppress most output (for CI/scripting).
        json_mode: Whether to output JSON format for programmatic use.
    """

    def __init__(
        self,
        color: bool = True,
        verbose: bool = False,
        quiet: bool = False,
        json_mode: bool = False,
    ):
        """
        Initialize the console output helper.

        Args:
            color: Enable colored output. Automatically disabled if stdout is not a TTY.
            verbose: Enable verbose debug output.
            quiet: Suppress most output, only show errors and final summary.
            json_mode: Output JSON format instead of text.
        """
        self.json_mode = json_mode
        self.color = color and sys.stdout.isatty() and not json_mode
        self.verbose = verbose
        self.quiet = quiet or json_mode

        if self.quiet:
            self.verbose = False

    def _c(self, text: str, *codes: str) -> str:
        """
        Apply color codes to text.

        Returns:
            Colorized text with reset code appended, or plain text if color is disabled.
        """
        if not self.color:
            return text
        return "".join(codes) + text + Colors.RESET

    def print(self, text: str = "", force: bool = False) -> None:
        """
        Print text to stdout.

        Args:
            text: Text to print. Defaults to empty string for blank line.
            force: Print even in quiet mode.
        """
        if self.quiet and not force:
            return
        print(text)

    def header(self, text: str) -> None:
        if self.quiet:
            return
        width = max(len(text) + 4, 50)
        border = self._c(Symbols.BOX_H * width, Colors.CYAN) if self.color else "-" * width

        self.print()
        self.print(border)
        self.print(self._c(f"  {text}", Colors.BOLD, Colors.CYAN))
        self.print(border)
        self.print()

    def section(self, text: str) -> None:
        if self.quiet:
            return
        self.print()
        self.print(self._c(f"{Symbols.ARROW} {text}", Colors.BOLD, Colors.BLUE))

    def success(self, text: str) -> None:
        if self.quiet:
            return
        self.print(self._c(f"  {Symbols.CHECK} {text}", Colors.GREEN))

    def error(self, text: str) -> None:
        """Print an error message. Always prints, even in quiet mode."""
        print(self._c(f"  {Symbols.CROSS} {text}", Colors.RED), file=sys.stderr)

    def warning(self, text: str) -> None:
        if self.quiet:
            return
        self.print(self._c(f"  {Symbols.WARN} {text}", Colors.YELLOW))

    def info(self, text: str) -> None:
        if self.quiet:
            return
        self.print(self._c(f"  {Symbols.INFO} {text}", Colors.CYAN))

    def detail(self, text: str) -> None:
        if self.quiet:
            return
        self.print(self._c(f"    {text}", Colors.DIM))

    def debug(self, text: str) -> None:
        if self.verbose:
            self.print(self._c(f"  [DEBUG] {text}", Colors.DIM))

    def item(self, text: str, status: str | None = None) -> None:
        """
        Print a list item with optional status indicator.

        Args:
            text: Item text to display.
            status: "ok", "fail", "manual" or any other short label.
        """
        if self.quiet:
            return
        status_str = ""
        if status == "ok":
            status_str = self._c(f" [{Symbols.CHECK}]", Colors.GREEN)
        elif status == "fail":
            status_str = self._c(f" [{Symbols.CROSS}]", Colors.RED)
        elif status == "manual":
            status_str = self._c(" [MANUAL]", Colors.YELLOW)
        elif status:
            status_str = self._c(f" [{status}]", Colors.DIM)

        self.print(f"    {Symbols.DOT} {text}{status_str}")

    def table(self, headers: list[str], rows: list[list[str]]) -> None:
        """
        Print a formatted table with headers.

        Args:
            headers: List of column header strings.
            rows: List of rows, where each row is a list of cell values.
        """
        if self.quiet:
            return
        widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row):
                if i < len(widths):
                    widths[i] = max(widths[i], len(str(cell)))

        header_line = "  " + "  ".join(
            self._c(h.ljust(widths[i]), Colors.BOLD) for i, h in enumerate(headers)
        )
        self.print(header_line)
        self.print("  " + "  ".join("-" * w for w in widths))

        for row in rows:
            row_line = "  " + "  ".join(
                str(cell).ljust(widths[i]) if i < len(widths) else str(cell)
                for i, cell in enumerate(row)
            )
            self.print(row_line)

    def config_errors(self, errors: list[str]) -> None:
        """Print configuration errors. Always prints."""
        if self.json_mode:
            print(json.dumps({"valid": False, "errors": errors}, indent=2))
            return
        self.error(f"{len(errors)} configuration error(s):")
        for e in errors:
            print(f"      {e}", file=sys.stderr)

    def sync_result(self, result: SyncResult) -> None:
        """
        Print a formatted workflow result.

        Shows the single top-level error, how many steps were rolled back
        and which ones need an operator. In JSON mode, outputs a structured
        JSON object.

        Args:
            result: SyncResult returned by a workflow.
        """
        if self.json_mode:
            output = {
                "success": result.success,
                "workflow": result.workflow.value,
                "operations": [op.to_dict() for op in result.completed_operations],
                "error": str(result.error) if result.error else None,
                "failed_operation": str(result.failed_operation)
                if result.failed_operation
                else None,
                "resolution": result.resolution.value if result.resolution else None,
                "rolled_back": result.rolled_back_count,
                "manual_attention": [o.to_dict() for o in result.manual_attention],
                "warnings": list(result.warnings),
            }
            print(json.dumps(output, indent=2, default=str))
            return

        if self.quiet:
            status = "OK" if result.success else "FAILED"
            parts = [
                f"status={status}",
                f"workflow={result.workflow.value}",
                f"operations={len(result.completed_operations)}",
            ]
            if result.rollback is not None:
                parts.append(f"rolled_back={result.rolled_back_count}")
                parts.append(f"manual={len(result.manual_attention)}")
            print(" ".join(parts))
            if result.error:
                print(f"ERROR: {result.error}")
            return

        self.section(f"{result.workflow.value.capitalize()} workflow")
        self.print()

        for op in result.completed_operations:
            self.item(op.describe(), "ok")
        if result.resolution is not None:
            self.info(f"Resolution: {result.resolution.value}")

        for w in result.warnings:
            self.warning(w)

        if result.success:
            self.print()
            self.success(f"{result.workflow.value.capitalize()} completed")
            return

        self.print()
        self.error(str(result.error))
        if result.failed_operation is not None:
            self.detail(f"Failed step: {result.failed_operation}")

        if result.rollback is not None:
            self.print()
            self.table(
                ["Rollback", "Count"],
                [
                    ["Rolled back", str(result.rolled_back_count)],
                    ["Needs attention", str(len(result.manual_attention))],
                ],
            )
            for outcome in result.manual_attention:
                compensation = outcome.operation.compensation
                status = "manual" if outcome.status.value == "manual" else "fail"
                self.item(
                    f"{outcome.operation.platform.display_name}: {compensation.describe()}",
                    status,
                )
                if outcome.error is not None:
                    self.detail(str(outcome.error))

    def audit_record(self, record: AuditRecord) -> None:
        """Print one audit record as a single line (or a JSON object)."""
        if self.json_mode:
            print(json.dumps(record.to_dict(), default=str))
            return
        level = self._c(record.level.upper().ljust(5), LEVEL_COLORS.get(record.level, ""))
        line = f"  {record.timestamp}  {level}  {record.action}"
        error = record.metadata.get("error")
        if error:
            line += f"  {error}"
        print(line)
        manual = record.metadata.get("manual_cleanup") or []
        for entry in manual:
            self.detail(f"{entry.get('platform')} {entry.get('handle')}: {entry.get('status')}")
