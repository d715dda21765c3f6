from __future__ import annotations

import asyncio
from typing import Any, Dict, List

from odootools.common.errors import RemoteCallError
from odootools.common.logger import get_logger
from odootools.inspection.models import ModuleComparison, ModuleInfo, ModuleVersionDiff, RecordCount
from odootools.rpc.session import RemoteSession

logger = get_logger("inspection.modules")

MODULE_MODEL = "ir.module.module"
MODULE_FIELDS = ["name", "display_name", "state"]


def _as_modules(records: Any) -> List[ModuleInfo]:
    return [ModuleInfo.model_validate(_blank_falses(r)) for r in records or []]


def _blank_falses(record: Dict[str, Any]) -> Dict[str, Any]:
    # Odoo serializes empty char fields as False.
    return {k: (None if v is False else v) for k, v in record.items()}


async def list_modules(session: RemoteSession) -> List[ModuleInfo]:
    """Returns every module known to the server, ordered by display name."""
    records = await session.invoke(
        MODULE_MODEL,
        "search_read",
        [[]],
        {"fields": MODULE_FIELDS, "order": "display_name"},
    )
    return _as_modules(records)


async def installed_modules(session: RemoteSession) -> List[ModuleInfo]:
    records = await session.invoke(
        MODULE_MODEL,
        "search_read",
        [[["state", "=", "installed"]]],
        {"fields": MODULE_FIELDS + ["installed_version"]},
    )
    return _as_modules(records)


async def compare_modules(env1: RemoteSession, env2: RemoteSession) -> ModuleComparison:
    """Diffs the installed modules of two servers."""
    await asyncio.gather(env1.authenticate(), env2.authenticate())
    modules1, modules2 = await asyncio.gather(installed_modules(env1), installed_modules(env2))

    by_name1 = {m.name: m for m in modules1}
    by_name2 = {m.name: m for m in modules2}

    comparison = ModuleComparison(
        only_in_env1=[m for m in modules1 if m.name not in by_name2],
        only_in_env2=[m for m in modules2 if m.name not in by_name1],
        common=[m for m in modules1 if m.name in by_name2],
    )
    for module in comparison.common:
        other = by_name2[module.name]
        if module.installed_version and other.installed_version and module.installed_version != other.installed_version:
            comparison.version_diff.append(
                ModuleVersionDiff(
                    name=module.name,
                    env1_version=module.installed_version,
                    env2_version=other.installed_version,
                )
            )

    logger.info(
        f"Compared {env1} and {env2}: {len(comparison.common)} common, "
        f"{len(comparison.only_in_env1)}/{len(comparison.only_in_env2)} exclusive"
    )
    return comparison


async def count_records(session: RemoteSession, model: str, domain: List[Any]) -> RecordCount:
    """Counts the records of ``model`` matching ``domain``."""
    if not isinstance(domain, list):
        raise ValueError("Domain must be a list")

    count = await session.invoke(model, "search_count", [domain])
    if not isinstance(count, int) or isinstance(count, bool):
        raise RemoteCallError("Invalid response from server")
    return RecordCount(model=model, domain=domain, count=count)
