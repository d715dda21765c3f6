from __future__ import annotations

from typing import Any, Dict, List

from odootools.common.logger import get_logger
from odootools.inspection.access import (
    read_access,
    find_user,
    many2one_id,
    normalize_many2many_ids,
    permissions_of,
    resolve_user_group_ids,
)
from odootools.inspection.models import (
    GroupInsight,
    GroupInsightReport,
    GroupRef,
    GroupTotals,
    ModelAccess,
    UserRef,
)
from odootools.rpc.session import RemoteSession

logger = get_logger("inspection.groups")

GROUP_FIELDS = ["id", "display_name", "name", "category_id", "implied_ids", "users", "comment"]


def _group_label(group: Dict[str, Any]) -> str:
    name = group.get("display_name")
    return name if isinstance(name, str) else str(group.get("name"))


def _fallback_model_name(raw: Any, model_id: int) -> str:
    if isinstance(raw, (list, tuple)) and len(raw) > 1:
        return str(raw[1])
    return str(model_id)


async def group_insight(session: RemoteSession, login: str) -> GroupInsightReport:
    """Describes every group of the user with ``login``: category, implied
    groups, member count and the model permissions each group grants."""
    await session.authenticate()
    user = await find_user(session, login)
    group_ids = await resolve_user_group_ids(session, user["id"], user.get("groups_id"))

    groups: List[Dict[str, Any]] = []
    if group_ids:
        groups = await session.invoke("res.groups", "read", [group_ids], {"fields": GROUP_FIELDS})

    implied_ids = set()
    for group in groups:
        implied_ids.update(normalize_many2many_ids(group.get("implied_ids")))

    extra_ids = sorted(i for i in implied_ids if i not in group_ids)
    implied_groups: List[Dict[str, Any]] = []
    if extra_ids:
        implied_groups = await session.invoke(
            "res.groups", "read", [extra_ids], {"fields": ["id", "display_name", "name"]}
        )
    names = {int(g["id"]): _group_label(g) for g in groups + implied_groups}

    access_records: List[Dict[str, Any]] = []
    if group_ids:
        access_records = await read_access(
            session,
            [["group_id", "in", group_ids]],
            ["group_id", "model_id", "perm_read", "perm_write", "perm_create", "perm_unlink"],
        )

    model_ids = sorted({mid for mid in (many2one_id(r.get("model_id")) for r in access_records) if mid is not None})
    model_info: Dict[int, Dict[str, Any]] = {}
    if model_ids:
        for model in await session.invoke("ir.model", "read", [model_ids], {"fields": ["id", "model", "name"]}):
            model_info[int(model["id"])] = model

    per_group: Dict[int, Dict[int, ModelAccess]] = {}
    for record in access_records:
        group_id = many2one_id(record.get("group_id"))
        model_id = many2one_id(record.get("model_id"))
        if group_id is None or model_id is None:
            continue

        by_model = per_group.setdefault(group_id, {})
        current = by_model.get(model_id)
        if current is None:
            info = model_info.get(model_id, {})
            current = ModelAccess(
                model=info.get("model") or "",
                model_name=info.get("name") or _fallback_model_name(record.get("model_id"), model_id),
            )
        merged = current.merge(permissions_of(record))
        by_model[model_id] = ModelAccess(model=current.model, model_name=current.model_name, **merged.model_dump())

    insights = []
    for group in groups:
        group_id = int(group["id"])
        category_raw = group.get("category_id")
        category = None
        if isinstance(category_raw, (list, tuple)) and len(category_raw) >= 2:
            category = GroupRef(id=int(category_raw[0]), name=str(category_raw[1]))

        implied = [
            GroupRef(id=i, name=names.get(i, f"Group {i}"))
            for i in normalize_many2many_ids(group.get("implied_ids"))
        ]
        access = sorted(per_group.get(group_id, {}).values(), key=lambda a: a.model_name)
        users = group.get("users")
        comment = group.get("comment")

        insights.append(
            GroupInsight(
                id=group_id,
                name=_group_label(group),
                technical_name=group["name"] if isinstance(group.get("name"), str) else None,
                category=category,
                implied_groups=implied,
                implied_count=len(implied),
                users_count=len(users) if isinstance(users, list) else 0,
                access_rights=access,
                notes=comment if isinstance(comment, str) else None,
            )
        )

    insights.sort(key=lambda g: g.name)
    logger.info(f"User {login}: {len(insights)} group(s), {len(implied_ids)} implied")

    return GroupInsightReport(
        user=UserRef(id=user["id"], name=user["name"], login=user["login"]),
        groups=insights,
        totals=GroupTotals(
            groups=len(insights),
            implied_groups=len(implied_ids),
            models_with_access=len({a.model for g in insights for a in g.access_rights}),
        ),
    )
