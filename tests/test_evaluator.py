import uuid

import pytest
from sqlalchemy import insert, text
from sqlalchemy.exc import OperationalError

from admin_rbac.models.permission import PermissionCategory
from admin_rbac.models.role import Role, role_permissions
from admin_rbac.rbac.catalog import ALL_CODES
from admin_rbac.rbac.errors import EvaluationError
from admin_rbac.rbac.evaluator import PermissionEvaluator, action_permissions, menu_permissions


class BrokenSession:
    """Stands in for an AsyncSession whose database is unreachable."""

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))


@pytest.mark.asyncio
async def test_editor_scenario(db, make_role, make_user):
    editor = await make_role("editor", ["menu.products", "action.products.edit"])
    user = await make_user(editor)
    evaluator = PermissionEvaluator(db)

    assert await evaluator.evaluate_permissions(user.id) == {"menu.products", "action.products.edit"}
    assert await evaluator.has_permission(user.id, "action.products.edit") is True
    assert await evaluator.has_permission(user.id, "action.products.delete") is False


@pytest.mark.asyncio
async def test_user_without_role_holds_nothing(db, make_user):
    user = await make_user(None)
    evaluator = PermissionEvaluator(db)

    assert await evaluator.evaluate_permissions(user.id) == frozenset()
    assert await evaluator.has_permission(user.id, "menu.products") is False


@pytest.mark.asyncio
async def test_unknown_principal_holds_nothing(db):
    evaluator = PermissionEvaluator(db)
    stranger = uuid.uuid4()

    assert await evaluator.evaluate_permissions(stranger) == frozenset()
    assert await evaluator.has_permission(stranger, "menu.products") is False


@pytest.mark.asyncio
async def test_has_permission_agrees_with_evaluate(db, make_role, make_user):
    role = await make_role(
        "order_desk",
        ["menu.orders", "action.orders.view", "action.orders.manage", "menu.customers"],
    )
    user = await make_user(role)
    evaluator = PermissionEvaluator(db)

    granted = await evaluator.evaluate_permissions(user.id)
    for code in ALL_CODES:
        assert await evaluator.has_permission(user.id, code) is (code in granted)


@pytest.mark.asyncio
async def test_result_does_not_depend_on_insertion_order(db, permission_ids, make_user):
    codes = ["menu.products", "action.products.view", "action.products.edit"]
    forward = Role(name="forward")
    backward = Role(name="backward")
    db.add_all([forward, backward])
    await db.flush()
    for role, ordered in ((forward, codes), (backward, list(reversed(codes)))):
        for code in ordered:
            await db.execute(
                insert(role_permissions).values(role_id=role.id, permission_id=permission_ids[code])
            )
    await db.commit()

    first = await make_user(forward)
    second = await make_user(backward)
    evaluator = PermissionEvaluator(db)

    assert await evaluator.evaluate_permissions(first.id) == await evaluator.evaluate_permissions(second.id)


@pytest.mark.asyncio
async def test_permission_details_carry_category(db, make_role, make_user):
    role = await make_role("catalog_viewer", ["menu.categories", "action.categories.view"])
    user = await make_user(role)

    details = await PermissionEvaluator(db).evaluate_permission_details(user.id)

    assert {(d.code, d.category) for d in details} == {
        ("menu.categories", PermissionCategory.MENU),
        ("action.categories.view", PermissionCategory.ACTION),
    }


@pytest.mark.asyncio
async def test_category_filters_over_evaluated_set(db, make_role, make_user):
    role = await make_role("editor", ["menu.products", "action.products.edit"])
    user = await make_user(role)

    codes = await PermissionEvaluator(db).evaluate_permissions(user.id)

    assert menu_permissions(codes) == {"menu.products"}
    assert action_permissions(codes) == {"action.products.edit"}


@pytest.mark.asyncio
async def test_store_failure_raises_evaluation_error():
    evaluator = PermissionEvaluator(BrokenSession())
    principal = uuid.uuid4()

    with pytest.raises(EvaluationError):
        await evaluator.evaluate_permissions(principal)
    with pytest.raises(EvaluationError):
        await evaluator.has_permission(principal, "menu.products")
    with pytest.raises(EvaluationError):
        await evaluator.granted_among(principal, ["menu.products", "menu.orders"])


@pytest.mark.asyncio
async def test_unreadable_category_raises_evaluation_error(db, make_role, make_user):
    role = await make_role("editor", ["menu.products", "action.products.edit"])
    user = await make_user(role)
    await db.execute(text("UPDATE permissions SET category = 'bogus' WHERE code = 'menu.products'"))
    await db.commit()
    evaluator = PermissionEvaluator(db)

    with pytest.raises(EvaluationError):
        await evaluator.evaluate_permission_details(user.id)
    with pytest.raises(EvaluationError):
        await evaluator.evaluate_permissions(user.id)


# ============================================================================
# Any / all checks
# ============================================================================

@pytest.mark.asyncio
async def test_granted_among_returns_held_subset(db, make_role, make_user):
    role = await make_role("order_desk", ["menu.orders", "action.orders.view"])
    user = await make_user(role)
    evaluator = PermissionEvaluator(db)

    granted = await evaluator.granted_among(
        user.id, ["action.orders.view", "action.orders.manage", "no.such.code"]
    )

    assert granted == {"action.orders.view"}


@pytest.mark.asyncio
async def test_has_any_and_has_all(db, make_role, make_user):
    role = await make_role("order_desk", ["menu.orders", "action.orders.view"])
    user = await make_user(role)
    evaluator = PermissionEvaluator(db)

    assert await evaluator.has_any_permission(user.id, ["action.orders.view", "action.orders.manage"]) is True
    assert await evaluator.has_any_permission(user.id, ["action.products.edit", "action.orders.manage"]) is False
    assert await evaluator.has_all_permissions(user.id, ["menu.orders", "action.orders.view"]) is True
    assert await evaluator.has_all_permissions(user.id, ["action.orders.view", "action.orders.manage"]) is False


@pytest.mark.asyncio
async def test_any_and_all_over_empty_list(db, make_user):
    user = await make_user(None)
    evaluator = PermissionEvaluator(db)

    assert await evaluator.has_any_permission(user.id, []) is False
    assert await evaluator.has_all_permissions(user.id, []) is True
    assert await evaluator.granted_among(user.id, []) == frozenset()
