from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

from odootools.common.errors import NotFoundError
from odootools.common.logger import get_logger
from odootools.inspection.models import (
    AccessComparison,
    AccessDifference,
    AccessReport,
    ModelAccess,
    Permissions,
    UserRef,
)
from odootools.rpc.session import RemoteSession

logger = get_logger("inspection.access")

ACCESS_FIELDS = ["model_id", "perm_read", "perm_write", "perm_create", "perm_unlink"]


def _to_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def normalize_many2many_ids(value: Any) -> List[int]:
    """Flattens an Odoo x2many value into a list of ids.

    Accepts plain id lists, ``[id, display_name]`` pairs, a single id, or a
    falsy value; entries that are not numeric are dropped.
    """
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        ids = []
        for item in value:
            raw = item[0] if isinstance(item, (list, tuple)) and item else item
            item_id = _to_int(raw)
            if item_id is not None:
                ids.append(item_id)
        return ids
    item_id = _to_int(value)
    return [] if item_id is None else [item_id]


def many2one_id(value: Any) -> Optional[int]:
    """Returns the id part of a many2one value (``[id, name]`` or ``id``)."""
    if isinstance(value, (list, tuple)):
        return _to_int(value[0]) if value else None
    return _to_int(value)


def permissions_of(record: Dict[str, Any]) -> Permissions:
    return Permissions(
        read=bool(record.get("perm_read")),
        write=bool(record.get("perm_write")),
        create=bool(record.get("perm_create")),
        unlink=bool(record.get("perm_unlink")),
    )


async def find_user(session: RemoteSession, login: str) -> Dict[str, Any]:
    """Reads ``id, name, login, groups_id`` of the user with ``login``."""
    user_ids = await session.invoke("res.users", "search", [[["login", "=", login]]], {"limit": 1})
    if not user_ids:
        raise NotFoundError(f"User '{login}' not found")

    users = await session.invoke(
        "res.users", "read", [[user_ids[0]]], {"fields": ["id", "name", "login", "groups_id"]}
    )
    if not users:
        raise NotFoundError("Could not read user data")
    return users[0]


async def resolve_user_group_ids(session: RemoteSession, user_id: int, raw_groups: Any) -> List[int]:
    """Returns the user's group ids, searching ``res.groups`` when the user
    record did not expose them."""
    group_ids = list(dict.fromkeys(normalize_many2many_ids(raw_groups)))

    if not group_ids:
        logger.debug(f"No groups on user {user_id} record, searching res.groups")
        found = await session.invoke("res.groups", "search", [[["users", "in", [user_id]]]])
        if isinstance(found, list):
            group_ids = [gid for gid in (_to_int(g) for g in found) if gid is not None]

    return group_ids


async def read_access(session: RemoteSession, domain: List[Any], fields: List[str]) -> List[Dict[str, Any]]:
    access_ids = await session.invoke("ir.model.access", "search", [domain])
    if not access_ids:
        return []
    return await session.invoke("ir.model.access", "read", [access_ids], {"fields": fields})


def merge_access(records: List[Dict[str, Any]]) -> Dict[int, Permissions]:
    """OR-merges access rows per model id."""
    merged: Dict[int, Permissions] = {}
    for record in records:
        model_id = many2one_id(record.get("model_id"))
        if model_id is None:
            continue
        merged[model_id] = merged.get(model_id, Permissions()).merge(permissions_of(record))
    return merged


async def check_access_rights(session: RemoteSession, login: str) -> AccessReport:
    """Computes the effective model permissions of the user with ``login``.

    Group-specific access rows of the user's groups are merged with global
    (group-less) rows; only models with at least one permission are kept.
    """
    await session.authenticate()
    user = await find_user(session, login)
    group_ids = await resolve_user_group_ids(session, user["id"], user.get("groups_id"))

    model_ids = await session.invoke("ir.model", "search", [[]])
    models = await session.invoke("ir.model", "read", [model_ids], {"fields": ["id", "model", "name"]})

    group_access: List[Dict[str, Any]] = []
    if group_ids:
        group_access = await read_access(session, [["group_id", "in", group_ids]], ACCESS_FIELDS)
    public_access = await read_access(session, [["group_id", "=", False]], ACCESS_FIELDS)

    merged = merge_access(group_access + public_access)

    rights = []
    for model in models:
        perms = merged.get(_to_int(model["id"]), Permissions())
        if perms.any:
            rights.append(ModelAccess(model=model["model"], model_name=model["name"], **perms.model_dump()))

    logger.info(f"User {login}: access to {len(rights)} of {len(models)} models")
    return AccessReport(
        user_id=user["id"],
        user_name=user["name"],
        user_login=user["login"],
        access_rights=rights,
        total_models=len(models),
        models_with_access=len(rights),
    )


async def compare_access_rights(
    env1: RemoteSession,
    login1: str,
    env2: RemoteSession,
    login2: str,
) -> AccessComparison:
    """Diffs the effective permissions of two users (possibly on two servers)."""
    report1, report2 = await asyncio.gather(
        check_access_rights(env1, login1),
        check_access_rights(env2, login2),
    )
    by_model1 = {a.model: a for a in report1.access_rights}
    by_model2 = {a.model: a for a in report2.access_rights}

    comparison = AccessComparison(
        user1=UserRef(id=report1.user_id, name=report1.user_name, login=report1.user_login),
        user2=UserRef(id=report2.user_id, name=report2.user_name, login=report2.user_login),
        only_user1=[a for a in report1.access_rights if a.model not in by_model2],
        only_user2=[a for a in report2.access_rights if a.model not in by_model1],
    )

    for model, access1 in sorted(by_model1.items()):
        access2 = by_model2.get(model)
        if access2 is None:
            continue
        perms1 = Permissions(**access1.model_dump(include={"read", "write", "create", "unlink"}))
        perms2 = Permissions(**access2.model_dump(include={"read", "write", "create", "unlink"}))
        if perms1 == perms2:
            comparison.identical_count += 1
        else:
            comparison.different.append(
                AccessDifference(model=model, model_name=access1.model_name, user1=perms1, user2=perms2)
            )

    return comparison
