"""
Permission catalog — the static universe of permission codes.

Code format (case-sensitive, dot-delimited):

    menu.<resource>              visibility of a UI section
    action.<resource>.<verb>     capability on that resource

Every action code is expected to travel together with the menu code of
its resource on the same role; `missing_menu_codes` computes what a
proposed set lacks so the store can enforce it.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass

from admin_rbac.models.permission import PermissionCategory

MENU_PREFIX = "menu."
ACTION_PREFIX = "action."

_SEGMENT = r"[a-z][a-z0-9_]*"
_MENU_RE = re.compile(rf"^menu\.({_SEGMENT})$")
_ACTION_RE = re.compile(rf"^action\.({_SEGMENT})\.({_SEGMENT})$")


@dataclass(frozen=True)
class ParsedCode:
    category: PermissionCategory
    resource: str
    verb: str | None = None


def parse_permission_code(code: str) -> ParsedCode:
    """Split a code into (category, resource, verb).  Raises ValueError if malformed."""
    match = _MENU_RE.match(code)
    if match:
        return ParsedCode(PermissionCategory.MENU, match.group(1))
    match = _ACTION_RE.match(code)
    if match:
        return ParsedCode(PermissionCategory.ACTION, match.group(1), match.group(2))
    raise ValueError(f"Malformed permission code: {code!r}")


def menu_code_for(code: str) -> str:
    """`action.products.edit` → `menu.products` (menu codes map to themselves)."""
    return f"{MENU_PREFIX}{parse_permission_code(code).resource}"


def menu_permissions(codes: Iterable[str]) -> set[str]:
    return {code for code in codes if code.startswith(MENU_PREFIX)}


def action_permissions(codes: Iterable[str]) -> set[str]:
    return {code for code in codes if code.startswith(ACTION_PREFIX)}


def missing_menu_codes(codes: Iterable[str]) -> set[str]:
    """Menu codes required by the action codes in `codes` but absent from it."""
    codes = set(codes)
    required = {menu_code_for(code) for code in action_permissions(codes)}
    return required - codes


# ────────────────────────────────────────────────────────────────────
# CANONICAL PERMISSION LIST
# ────────────────────────────────────────────────────────────────────
RESOURCES: dict[str, dict[str, object]] = {
    "users": {"label": "Users", "verbs": ["view", "create", "edit", "delete"]},
    "roles": {"label": "Roles", "verbs": ["view", "create", "edit", "delete"]},
    "categories": {"label": "Categories", "verbs": ["view", "create", "edit", "delete"]},
    "products": {"label": "Products", "verbs": ["view", "create", "edit", "delete"]},
    "customers": {"label": "Customers", "verbs": ["view", "edit", "suspend"]},
    "orders": {"label": "Orders", "verbs": ["view", "manage"]},
}

VERB_DESCRIPTIONS: dict[str, str] = {
    "view": "View {label}",
    "create": "Create {label}",
    "edit": "Edit {label}",
    "delete": "Delete {label}",
    "suspend": "Suspend {label}",
    "manage": "Create {label} and update their status",
}


def _build_catalog() -> list[dict[str, str]]:
    entries: list[dict[str, str]] = []
    for resource, meta in RESOURCES.items():
        label = str(meta["label"])
        entries.append({
            "code": f"menu.{resource}",
            "name": f"{label} menu",
            "description": f"See the {label} section",
            "category": PermissionCategory.MENU.value,
        })
        for verb in meta["verbs"]:  # type: ignore[union-attr]
            entries.append({
                "code": f"action.{resource}.{verb}",
                "name": f"{verb.capitalize()} {label.lower()}",
                "description": VERB_DESCRIPTIONS[verb].format(label=label.lower()),
                "category": PermissionCategory.ACTION.value,
            })
    return entries


PERMISSIONS: list[dict[str, str]] = _build_catalog()
ALL_CODES: frozenset[str] = frozenset(entry["code"] for entry in PERMISSIONS)

# ────────────────────────────────────────────────────────────────────
# DEFAULT ROLES
# ────────────────────────────────────────────────────────────────────
ROLE_PERMISSIONS: dict[str, list[str]] = {
    "super_admin": sorted(ALL_CODES),
    "viewer": sorted(
        menu_permissions(ALL_CODES)
        | {code for code in ALL_CODES if code.endswith(".view")}
    ),
}

ROLE_DESCRIPTIONS: dict[str, str] = {
    "super_admin": "Full access to every section and action",
    "viewer": "Read-only access to every section",
}
