"""Rich terminal output for validation results."""

import json
import os

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import IssueStatus, RepositoryState, Severity, ValidationIssue
from .remediation import RemediationSummary

console = Console()

STATUS_STYLES = {
    IssueStatus.PENDING: "yellow",
    IssueStatus.FIXED: "green",
    IssueStatus.FAILED: "red",
    IssueStatus.UNFIXABLE: "magenta",
    IssueStatus.MANUAL_FIX_REQUIRED: "cyan",
}


def severity_text(severity: Severity) -> Text:
    if severity == Severity.ERROR:
        return Text("error", style="bold red")
    return Text("warning", style="bold yellow")


def display_issues(issues: list[ValidationIssue], title: str = "Version Check Results"):
    """Display a summary table of all issues."""
    if not issues:
        console.print("[green]All version refs and releases follow the versioning rules.[/green]")
        return

    table = Table(title=title, box=box.ROUNDED, show_lines=True)
    table.add_column("#", width=4, justify="right")
    table.add_column("Severity", width=8)
    table.add_column("Type", style="cyan", max_width=26)
    table.add_column("Version", style="bold", max_width=16)
    table.add_column("Status", width=20)
    table.add_column("Message")

    for i, issue in enumerate(issues, 1):
        table.add_row(
            str(i),
            severity_text(issue.severity),
            issue.type,
            issue.version,
            Text(issue.status.value, style=STATUS_STYLES[issue.status]),
            escape(issue.message),
        )

    console.print()
    console.print(table)

    errors = sum(1 for i in issues if i.severity == Severity.ERROR)
    console.print(
        f"\n  Total: {len(issues)} issue(s), "
        f"[red]{errors} error(s)[/red], "
        f"[yellow]{len(issues) - errors} warning(s)[/yellow]"
    )


def display_manual_commands(state: RepositoryState, issues: list[ValidationIssue]):
    """Show the commands that would fix the unresolved issues by hand."""
    lines = []
    for issue in issues:
        if issue.status == IssueStatus.FIXED:
            continue
        commands = issue.manual_commands(state)
        if not commands:
            continue
        lines.append(f"# {issue.type}: {issue.version}")
        lines.extend(commands)

    if lines:
        console.print()
        console.print(Panel(escape("\n".join(lines)), title="Manual fix commands", box=box.ROUNDED))


def display_summary(summary: RemediationSummary):
    if not summary.attempted:
        return
    console.print(
        f"\n  Auto-fix: [green]{summary.fixed} fixed[/green], "
        f"[red]{summary.failed} failed[/red], "
        f"[magenta]{summary.unfixable} unfixable[/magenta], "
        f"[cyan]{summary.manual_fix_required} need manual fixes[/cyan]"
    )


def annotation_lines(issues: list[ValidationIssue]) -> list[str]:
    """GitHub Actions workflow commands for issues that are still open."""
    lines = []
    for issue in issues:
        if issue.status == IssueStatus.FIXED:
            continue
        level = "error" if issue.severity == Severity.ERROR else "warning"
        message = issue.message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
        lines.append(f"::{level} title={issue.type}::{message}")
    return lines


def emit_annotations(issues: list[ValidationIssue]):
    if os.environ.get("GITHUB_ACTIONS") != "true":
        return
    for line in annotation_lines(issues):
        print(line)


def export_issues_json(state: RepositoryState, issues: list[ValidationIssue], filepath: str):
    """Export issues, with their manual commands, to a JSON file."""
    data = [dict(issue.to_dict(), manual_commands=issue.manual_commands(state)) for issue in issues]
    with open(filepath, "w") as f:
        json.dump(data, f, indent=2)
    console.print(f"\nResults exported to [cyan]{filepath}[/cyan]")
