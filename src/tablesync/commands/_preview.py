"""Statement preview shown before create and sync ask for confirmation."""

import re
from collections import Counter

from rich.console import Console
from rich.markup import escape

console = Console()

_TARGET = re.compile(r"^(?:CREATE TABLE|ALTER TABLE|INSERT INTO)\s+(\[[^\]]+\]|\S+)", re.I)
_MAX_LINES = 6


def statement_target(statement: str) -> str:
    """Table a DDL/DML statement operates on ("?" when it cannot be told)."""
    match = _TARGET.match(statement.strip())
    if not match:
        return "?"
    return match.group(1).strip("[]")


def statement_action(statement: str) -> str:
    upper = statement.upper()
    if upper.startswith("CREATE TABLE"):
        return "create"
    if " DROP CONSTRAINT " in upper:
        return "drop"
    if " ALTER COLUMN " in upper:
        return "alter"
    return "add"


def _layout(statement: str) -> list[str]:
    # CREATE TABLE column lists read better one column per line
    stmt = statement.strip()
    if stmt.upper().startswith("CREATE TABLE") and "(" in stmt:
        head, _, body = stmt.partition("(")
        columns = body[:-1].split(", ") if body.endswith(")") else [body]
        return [f"{head.rstrip()} ("] + [f"    {col}," for col in columns[:-1]] + [
            f"    {columns[-1]}",
            ")",
        ]
    return [stmt]


def print_sql_statements_preview(
    statements: list[str], title: str = "SQL Preview", action_prompt: str | None = None
) -> None:
    """Print the planned statements grouped by the table they touch.

    Args:
        statements: Statements in execution order
        title: Section title (e.g. "Sync Preview")
        action_prompt: Optional line printed after the listing
    """
    console.print()
    console.print(f"[bold]{title}:[/bold]")
    console.print("─" * 60)
    if not statements:
        console.print("\n  [dim](no statements)[/dim]")

    current = None
    for i, stmt in enumerate(statements, 1):
        target = statement_target(stmt)
        if target != current:
            current = target
            console.print(f"\n[bold cyan]{target}[/bold cyan]")
        lines = _layout(stmt)
        label = f"[dim]{i:>3}.[/dim] [magenta]{statement_action(stmt):<6}[/magenta]"
        console.print(f"{label} {escape(lines[0])}", highlight=False, soft_wrap=True)
        if len(lines) > _MAX_LINES:
            hidden = len(lines) - _MAX_LINES + 1
            lines = lines[: _MAX_LINES - 2] + [f"... ({hidden} more lines)", lines[-1]]
        for line in lines[1:]:
            console.print(f"            {line}", markup=False, highlight=False, soft_wrap=True)

    counts = Counter(statement_action(stmt) for stmt in statements)
    if counts:
        order = ("create", "drop", "alter", "add")
        summary = ", ".join(f"{counts[k]} {k}" for k in order if counts[k])
        console.print(f"\n[dim]{len(statements)} statements ({summary})[/dim]")
    console.print()
    if action_prompt:
        console.print(f"[bold]{action_prompt}[/bold]")
