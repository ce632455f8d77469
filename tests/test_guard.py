import uuid

import pytest

from admin_rbac.rbac.dependencies import require_permission
from admin_rbac.rbac.errors import EvaluationError, InternalError, Unauthenticated, Unauthorized
from admin_rbac.rbac.evaluator import PermissionEvaluator
from admin_rbac.rbac.guard import AccessGuard


class StaticEvaluator:
    def __init__(self, granted: set[str]):
        self.granted = granted
        self.checked: list[tuple[uuid.UUID, str]] = []

    async def has_permission(self, principal_id, code):
        self.checked.append((principal_id, code))
        return code in self.granted

    async def granted_among(self, principal_id, codes):
        self.checked.extend((principal_id, code) for code in codes)
        return frozenset(set(codes) & self.granted)


class FailingEvaluator:
    async def has_permission(self, principal_id, code):
        raise EvaluationError("store unavailable")


def _counting_operation():
    calls = []

    async def operation(*args, **kwargs):
        calls.append((args, kwargs))
        return "done"

    return operation, calls


@pytest.mark.asyncio
async def test_allowed_call_runs_operation_once():
    guard = AccessGuard(StaticEvaluator({"action.products.delete"}))
    operation, calls = _counting_operation()
    protected = guard.protect("action.products.delete")(operation)

    result = await protected(uuid.uuid4(), 42, force=True)

    assert result == "done"
    assert calls == [((42,), {"force": True})]
    assert protected.required_permissions == ("action.products.delete",)


@pytest.mark.asyncio
async def test_denied_call_never_runs_operation():
    guard = AccessGuard(StaticEvaluator({"action.products.view"}))
    operation, calls = _counting_operation()
    protected = guard.protect("action.products.delete")(operation)

    with pytest.raises(Unauthorized) as exc_info:
        await protected(uuid.uuid4(), 42)

    assert exc_info.value.code == "action.products.delete"
    assert "action.products.delete" in exc_info.value.message
    assert calls == []


@pytest.mark.asyncio
async def test_missing_principal_is_unauthenticated():
    evaluator = StaticEvaluator({"action.products.delete"})
    guard = AccessGuard(evaluator)
    operation, calls = _counting_operation()
    protected = guard.protect("action.products.delete")(operation)

    with pytest.raises(Unauthenticated):
        await protected(None)

    assert calls == []
    assert evaluator.checked == []


@pytest.mark.asyncio
async def test_evaluation_failure_is_internal_not_unauthorized():
    guard = AccessGuard(FailingEvaluator())
    operation, calls = _counting_operation()
    protected = guard.protect("action.products.delete")(operation)

    with pytest.raises(InternalError) as exc_info:
        await protected(uuid.uuid4())

    assert not isinstance(exc_info.value, Unauthorized)
    assert calls == []


@pytest.mark.asyncio
async def test_authorize_returns_principal_id():
    principal = uuid.uuid4()
    guard = AccessGuard(StaticEvaluator({"menu.orders"}))

    assert await guard.authorize(principal, "menu.orders") == principal


@pytest.mark.asyncio
async def test_guard_over_store(db, make_role, make_user):
    editor = await make_role("editor", ["menu.products", "action.products.edit"])
    user = await make_user(editor)
    guard = AccessGuard(PermissionEvaluator(db))

    async def update_product(product_id):
        return product_id

    edit = guard.protect("action.products.edit")(update_product)
    delete = guard.protect("action.products.delete")(update_product)

    assert await edit(user.id, 7) == 7
    with pytest.raises(Unauthorized):
        await delete(user.id, 7)


# ============================================================================
# Several codes
# ============================================================================

@pytest.mark.asyncio
async def test_require_all_reports_only_missing_codes():
    guard = AccessGuard(StaticEvaluator({"action.orders.view"}))
    operation, calls = _counting_operation()
    protected = guard.protect("action.orders.view", "action.orders.manage")(operation)

    with pytest.raises(Unauthorized) as exc_info:
        await protected(uuid.uuid4())

    assert exc_info.value.codes == ("action.orders.manage",)
    assert calls == []


@pytest.mark.asyncio
async def test_require_all_passes_when_every_code_is_held():
    guard = AccessGuard(StaticEvaluator({"action.orders.view", "action.orders.manage"}))
    operation, calls = _counting_operation()
    protected = guard.protect("action.orders.view", "action.orders.manage")(operation)

    assert await protected(uuid.uuid4()) == "done"
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_require_any_passes_with_one_code():
    guard = AccessGuard(StaticEvaluator({"action.orders.manage"}))
    operation, calls = _counting_operation()
    protected = guard.protect("action.orders.view", "action.orders.manage", require_all=False)(operation)

    assert await protected(uuid.uuid4()) == "done"
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_require_any_denied_with_none_held():
    guard = AccessGuard(StaticEvaluator({"menu.orders"}))
    operation, calls = _counting_operation()
    protected = guard.protect("action.orders.view", "action.orders.manage", require_all=False)(operation)

    with pytest.raises(Unauthorized) as exc_info:
        await protected(uuid.uuid4())

    assert exc_info.value.codes == ("action.orders.view", "action.orders.manage")
    assert exc_info.value.require_all is False
    assert calls == []


def test_protect_needs_a_code():
    guard = AccessGuard(StaticEvaluator(set()))
    with pytest.raises(ValueError):
        guard.protect()


@pytest.mark.asyncio
async def test_require_permission_dependency_modes(db, make_role, make_user):
    desk = await make_role("order_desk", ["menu.orders", "action.orders.view"])
    user = await make_user(desk)
    guard = AccessGuard(PermissionEvaluator(db))

    any_of = require_permission("action.orders.view", "action.orders.manage", require_all=False)
    all_of = require_permission("action.orders.view", "action.orders.manage")

    assert await any_of(principal_id=user.id, guard=guard) == user.id
    with pytest.raises(Unauthorized) as exc_info:
        await all_of(principal_id=user.id, guard=guard)
    assert exc_info.value.codes == ("action.orders.manage",)

    with pytest.raises(ValueError):
        require_permission()
