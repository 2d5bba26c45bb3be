"""Console reporter using Rich library for formatted CLI output.

Provides colorful, formatted output during validation including:
- Suite headers
- Per-check results with pass/fail indicators and failure details
- Final summary table of every check
"""

from rich.console import Console
from rich.table import Table
from rich import box
from rich.markup import escape
from rich.rule import Rule

from cloudx_validator.reporters.base import Reporter
from cloudx_validator.models import CheckResult, CheckStatus, SuiteResult

STATUS_MARKUP = {
    CheckStatus.PASS: "[green][PASS][/green]",
    CheckStatus.FAIL: "[red][FAIL][/red]",
    CheckStatus.ERROR: "[yellow][ERROR][/yellow]",
    CheckStatus.SKIP: "[dim][SKIP][/dim]",
}

SUMMARY_SYMBOLS = {
    CheckStatus.PASS: "[green]OK[/green]",
    CheckStatus.FAIL: "[red]X[/red]",
    CheckStatus.ERROR: "[yellow]?[/yellow]",
    CheckStatus.SKIP: "[dim]-[/dim]",
}


class ConsoleReporter(Reporter):
    """Rich-based console reporter for CLI output.

    Args:
        quiet: If True, suppress per-check output (only show summary)
        console: Optional Console to print to
    """

    def __init__(self, quiet: bool = False, console: Console = None):
        # Use legacy_windows=True for ASCII-safe output on Windows consoles
        self.console = console or Console(legacy_windows=True)
        self.quiet = quiet

    def on_check_start(self, suite_name: str, check_id: str) -> None:
        """Currently a no-op for console reporter."""
        pass

    def on_check_complete(self, suite_name: str, result: CheckResult) -> None:
        """Displays pass/fail indicator and, for non-passing checks, the detail."""
        if self.quiet:
            return

        self.console.print(f"  {STATUS_MARKUP[result.status]}: {result.name}")

        if result.detail and result.status != CheckStatus.PASS:
            self.console.print(f"     [dim]{escape(result.detail)}[/dim]", highlight=False)

    def on_suite_start(self, suite_name: str) -> None:
        """Displays a header with the suite name."""
        self.console.print()
        self.console.print(
            Rule(f"[bold cyan]{suite_name}[/bold cyan]", style="cyan", characters="-")
        )

    def on_suite_complete(self, result: SuiteResult) -> None:
        """Displays the suite's overall status."""
        if result.status == CheckStatus.PASS:
            status = "[bold green]PASSED[/bold green]"
        elif result.status == CheckStatus.FAIL:
            status = "[bold red]FAILED[/bold red]"
        else:
            status = "[bold yellow]ERROR[/bold yellow]"

        duration_str = ""
        if result.duration_seconds > 0:
            duration_str = f" in {result.duration_seconds:.1f}s"

        self.console.print()
        self.console.print(f"{result.suite_name}: {status}{duration_str}")

        if result.error_message:
            self.console.print(f"   [dim red]{escape(result.error_message)}[/dim red]")

    def on_run_complete(self, results: dict[str, SuiteResult]) -> None:
        """Displays a summary table of every check."""
        if not results:
            self.console.print("[yellow]No results to display.[/yellow]")
            return

        self.console.print()
        self.console.print(
            Rule("[bold]Deployment Validation Summary[/bold]", style="magenta", characters="-")
        )

        table = Table(
            title="",
            show_header=True,
            header_style="bold magenta",
            border_style="dim",
            box=box.ASCII,
        )

        table.add_column("Suite", style="cyan", no_wrap=True)
        table.add_column("Check", no_wrap=True)
        table.add_column("Result", justify="center", no_wrap=True)
        table.add_column("Expected")
        table.add_column("Actual")

        for suite_result in results.values():
            for check in suite_result.checks.values():
                table.add_row(
                    suite_result.suite_name,
                    check.name,
                    SUMMARY_SYMBOLS[check.status],
                    escape(check.expected or ""),
                    escape(check.actual or ""),
                )

        self.console.print(table)
        self.console.print()
