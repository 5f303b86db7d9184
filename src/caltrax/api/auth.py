"""Request authentication dependencies."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from caltrax.containers import AppContainer


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_api_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include the shared API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


async def current_user_id(
    x_user_id: str | None = Header(default=None),
    _token: None = Depends(require_api_token),
) -> str:
    """Return the authenticated user id forwarded by the identity provider."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing user id"
        )
    return x_user_id.strip()


async def require_paid_user(
    request: Request, user_id: str = Depends(current_user_id)
) -> str:
    """Return the user id when the user has a paid subscription."""
    container: AppContainer = request.app.state.container
    if container.settings.require_subscription and not (
        container.subscription_service.has_paid(user_id)
    ):
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail="Subscription required",
        )
    return user_id
