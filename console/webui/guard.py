from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from fastapi import HTTPException, status
from fastapi.responses import RedirectResponse

from console.config import dlog
from console.token_store import TokenStore


LOGIN_PATH = "/login"
DASHBOARD_PATH = "/dashboard"


def require_session(store: TokenStore, api: bool = False) -> Callable[[], Dict[str, Any]]:
    """Gate a view on the presence of a stored bearer token.

    Pages are redirected to the login view; JSON endpoints answer 401 with
    the redirect target so the browser script can navigate. The token is
    never validated here.
    """

    def dependency() -> Dict[str, Any]:
        if store.is_logged_in():
            return store.public_profile()
        dlog("guard_redirect", {"api": api})
        if api:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={"error": "Authentication required", "redirect": LOGIN_PATH},
            )
        raise HTTPException(
            status_code=status.HTTP_303_SEE_OTHER,
            detail="Authentication required",
            headers={"Location": LOGIN_PATH},
        )

    return dependency


def redirect_if_logged_in(store: TokenStore) -> Optional[RedirectResponse]:
    if store.is_logged_in():
        return RedirectResponse(DASHBOARD_PATH, status_code=status.HTTP_303_SEE_OTHER)
    return None
