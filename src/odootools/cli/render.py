from typing import Iterable, List, Optional

from rich.table import Table

from odootools.execution.contracts import QueryResult
from odootools.inspection.models import (
    AccessComparison,
    AccessReport,
    GroupInsightReport,
    ModelAccess,
    ModuleComparison,
    ModuleInfo,
    PoValidationReport,
)


def _flag(value: bool) -> str:
    return "[green]✔[/green]" if value else "[dim]-[/dim]"


def query_table(result: QueryResult) -> Table:
    table = Table(title=result.status_message or "Result", show_lines=False)
    for column in result.columns:
        table.add_column(column)
    for row in result.rows:
        table.add_row(*["[dim]NULL[/dim]" if cell is None else cell for cell in row])
    return table


def modules_table(modules: Iterable[ModuleInfo], title: str = "Modules") -> Table:
    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("Display name")
    table.add_column("State")
    for module in modules:
        table.add_row(module.name, module.display_name or "", module.state or "")
    return table


def module_comparison_tables(comparison: ModuleComparison) -> List[Table]:
    tables = [
        modules_table(comparison.only_in_env1, title="Only in env1"),
        modules_table(comparison.only_in_env2, title="Only in env2"),
    ]
    if comparison.version_diff:
        versions = Table(title="Version differences")
        versions.add_column("Module", style="cyan")
        versions.add_column("env1")
        versions.add_column("env2")
        for diff in comparison.version_diff:
            versions.add_row(diff.name, diff.env1_version or "", diff.env2_version or "")
        tables.append(versions)
    return tables


def access_table(rights: Iterable[ModelAccess], title: Optional[str] = None) -> Table:
    table = Table(title=title)
    table.add_column("Model", style="cyan")
    table.add_column("Name")
    for perm in ("Read", "Write", "Create", "Delete"):
        table.add_column(perm, justify="center")
    for access in rights:
        table.add_row(
            access.model,
            access.model_name,
            _flag(access.read),
            _flag(access.write),
            _flag(access.create),
            _flag(access.unlink),
        )
    return table


def access_report_table(report: AccessReport) -> Table:
    title = (
        f"{report.user_name} ({report.user_login}): "
        f"{report.models_with_access}/{report.total_models} models"
    )
    return access_table(report.access_rights, title=title)


def access_comparison_tables(comparison: AccessComparison) -> List[Table]:
    tables = [
        access_table(comparison.only_user1, title=f"Only {comparison.user1.login}"),
        access_table(comparison.only_user2, title=f"Only {comparison.user2.login}"),
    ]
    diff = Table(title=f"Different permissions ({comparison.identical_count} identical)")
    diff.add_column("Model", style="cyan")
    diff.add_column(comparison.user1.login)
    diff.add_column(comparison.user2.login)
    for item in comparison.different:
        diff.add_row(item.model, _perm_string(item.user1), _perm_string(item.user2))
    tables.append(diff)
    return tables


def _perm_string(perms) -> str:
    return "".join(
        letter if granted else "-"
        for letter, granted in zip("rwcd", (perms.read, perms.write, perms.create, perms.unlink))
    )


def group_table(report: GroupInsightReport) -> Table:
    table = Table(title=f"Groups of {report.user.name} ({report.user.login})")
    table.add_column("Group", style="cyan")
    table.add_column("Category")
    table.add_column("Implied")
    table.add_column("Users", justify="right")
    table.add_column("Models", justify="right")
    for group in report.groups:
        table.add_row(
            group.name,
            group.category.name if group.category else "",
            ", ".join(g.name for g in group.implied_groups),
            str(group.users_count),
            str(len(group.access_rights)),
        )
    return table


def po_issues_table(report: PoValidationReport) -> Table:
    stats = report.stats
    table = Table(
        title=(
            f"{stats.total_entries} entries, {stats.translated} translated, "
            f"{stats.missing} missing, {stats.duplicates} duplicate(s)"
        )
    )
    table.add_column("Type", style="cyan")
    table.add_column("msgid")
    table.add_column("Context")
    table.add_column("Details")
    for issue in report.issues:
        table.add_row(issue.type, issue.msgid, issue.msgctxt or "", issue.details)
    return table
