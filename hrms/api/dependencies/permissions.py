"""
Permission checking dependencies.

Guards name every acceptable (resource, action) pair. The user passes
if any one of them is granted; "manage" only satisfies a guard that
lists it.
"""

from typing import Callable
from fastapi import Depends, HTTPException, Request, status

from hrms.models.user import User
from hrms.services.resolver import AuthorizationResolver
from .auth import get_current_user
from .services import get_resolver


async def _granted_any(
    resolver: AuthorizationResolver,
    user_id: int,
    pairs: tuple[tuple[str, str], ...],
) -> bool:
    for resource, action in pairs:
        if await resolver.has_permission(user_id, resource, action):
            return True
    return False


def _denied(pairs: tuple[tuple[str, str], ...]) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Permission denied: " + " | ".join(f"{r}:{a}" for r, a in pairs),
    )


def require_any_permission(*pairs: tuple[str, str]) -> Callable:
    """
    Dependency factory passing when any listed (resource, action) pair is granted.

    Usage:
    ```python
    @router.get("")
    async def list_permissions(
        user: User = Depends(require_any_permission(
            ("permissions", "read"),
            ("roles", "read"),
        )),
    ):
        ...
    ```
    """

    async def check_permission(
        current_user: User = Depends(get_current_user),
        resolver: AuthorizationResolver = Depends(get_resolver),
    ) -> User:
        if not await _granted_any(resolver, current_user.id, pairs):
            raise _denied(pairs)
        return current_user

    return check_permission


def require_permission(resource: str, *actions: str) -> Callable:
    """
    Dependency factory for one resource and any of several actions.

    Usage:
    ```python
    @router.get("")
    async def list_roles(
        user: User = Depends(require_permission("roles", "read", "manage")),
    ):
        ...
    ```
    """
    return require_any_permission(*((resource, action) for action in actions))


def require_self_or_permission(
    resource: str,
    *actions: str,
    user_id_param: str = "user_id",
) -> Callable:
    """
    Dependency factory letting a user act on their own record, or anyone
    holding one of the listed permissions act on any record.
    """
    pairs = tuple((resource, action) for action in actions)

    async def check_permission(
        request: Request,
        current_user: User = Depends(get_current_user),
        resolver: AuthorizationResolver = Depends(get_resolver),
    ) -> User:
        target = request.path_params.get(user_id_param)
        if target is not None and str(current_user.id) == str(target):
            return current_user

        if not await _granted_any(resolver, current_user.id, pairs):
            raise _denied(pairs)
        return current_user

    return check_permission
