"""
Access guard — wraps a protected operation with a required permission.

    guard = AccessGuard(PermissionEvaluator(db))

    @guard.protect("action.products.delete")
    async def delete_product(product_id): ...

    await delete_product(principal_id, product_id)

Several codes mean "all of them"; pass `require_all=False` for "any one":

    @guard.protect("action.orders.view", "action.orders.manage", require_all=False)

The wrapped operation takes the caller's principal id (the request's
trust context) as its first argument.  The guard is stateless and may
wrap any number of operations concurrently.

`register_exception_handlers` is the one place where RBAC errors become
HTTP responses.
"""

import functools
import logging
import uuid
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from admin_rbac.rbac.errors import (
    DuplicateRole,
    EvaluationError,
    InternalError,
    InvalidPermissionSet,
    NotFound,
    RoleInUse,
    Unauthenticated,
    Unauthorized,
    VersionConflict,
)
from admin_rbac.rbac.evaluator import PermissionEvaluator

logger = logging.getLogger("rbac")

T = TypeVar("T")


class AccessGuard:
    def __init__(self, evaluator: PermissionEvaluator) -> None:
        self.evaluator = evaluator

    async def authorize(
        self,
        principal_id: uuid.UUID | None,
        *required_codes: str,
        require_all: bool = True,
    ) -> uuid.UUID:
        """Return the principal id if it holds `required_codes`, raise otherwise.

        With several codes the principal needs all of them, or any one of
        them when `require_all` is False.
        """
        if not required_codes:
            raise ValueError("At least one permission code is required")
        if principal_id is None:
            raise Unauthenticated()

        try:
            missing = await self._missing(principal_id, required_codes, require_all)
        except EvaluationError as exc:
            logger.exception("Permission check %s for %s failed", required_codes, principal_id)
            raise InternalError() from exc

        if missing:
            logger.warning("Permission denied for principal %s — required: %s", principal_id, missing)
            raise Unauthorized(*missing, require_all=require_all)
        return principal_id

    async def _missing(
        self, principal_id: uuid.UUID, codes: tuple[str, ...], require_all: bool
    ) -> tuple[str, ...]:
        if len(codes) == 1:
            return () if await self.evaluator.has_permission(principal_id, codes[0]) else codes
        granted = await self.evaluator.granted_among(principal_id, codes)
        if require_all:
            return tuple(code for code in codes if code not in granted)
        return () if granted else codes

    def protect(
        self, *required_codes: str, require_all: bool = True
    ) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
        if not required_codes:
            raise ValueError("At least one permission code is required")

        def decorator(operation: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
            @functools.wraps(operation)
            async def wrapper(principal_id: uuid.UUID | None, *args: Any, **kwargs: Any) -> T:
                await self.authorize(principal_id, *required_codes, require_all=require_all)
                return await operation(*args, **kwargs)

            wrapper.required_permissions = required_codes  # type: ignore[attr-defined]
            return wrapper

        return decorator


# ── HTTP mapping ─────────────────────────────────────────────────────


def _error(status_code: int, detail: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail, **extra})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(Unauthenticated)
    async def _unauthenticated(request: Request, exc: Unauthenticated) -> JSONResponse:
        response = _error(status.HTTP_401_UNAUTHORIZED, exc.message)
        response.headers["WWW-Authenticate"] = "Bearer"
        return response

    # Naming the missing code discloses policy shape, not data.
    @app.exception_handler(Unauthorized)
    async def _unauthorized(request: Request, exc: Unauthorized) -> JSONResponse:
        return _error(
            status.HTTP_403_FORBIDDEN,
            exc.message,
            required_permission=exc.code,
            required_permissions=list(exc.codes),
        )

    @app.exception_handler(NotFound)
    async def _not_found(request: Request, exc: NotFound) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, exc.message)

    @app.exception_handler(RoleInUse)
    async def _role_in_use(request: Request, exc: RoleInUse) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, exc.message, role_id=exc.role_id)

    @app.exception_handler(DuplicateRole)
    async def _duplicate_role(request: Request, exc: DuplicateRole) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, exc.message)

    @app.exception_handler(VersionConflict)
    async def _version_conflict(request: Request, exc: VersionConflict) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, exc.message, current_version=exc.actual)

    @app.exception_handler(InvalidPermissionSet)
    async def _invalid_permission_set(request: Request, exc: InvalidPermissionSet) -> JSONResponse:
        return _error(
            status.HTTP_400_BAD_REQUEST,
            exc.message,
            unknown_ids=exc.unknown_ids,
            missing_menu_codes=exc.missing_menu_codes,
        )

    @app.exception_handler(RequestValidationError)
    async def _validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid request", errors=errors)

    @app.exception_handler(InternalError)
    async def _internal(request: Request, exc: InternalError) -> JSONResponse:
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    @app.exception_handler(EvaluationError)
    async def _evaluation(request: Request, exc: EvaluationError) -> JSONResponse:
        logger.exception("Permission evaluation failed on %s", request.url.path, exc_info=exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    @app.exception_handler(SQLAlchemyError)
    async def _store(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.exception("Store failure on %s", request.url.path, exc_info=exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
