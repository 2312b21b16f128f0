from __future__ import annotations

import time
from typing import Any, Dict, List, Tuple
from urllib.parse import quote

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from console.auth_gateway import SettingsForm
from console.backend_client import BackendError, ConfirmationRequired, NetworkError, ValidationError
from console.config import dlog
from console.resources import ResourceManager, Upload, as_bool, check_filters
from console.webui.guard import DASHBOARD_PATH, LOGIN_PATH, redirect_if_logged_in, require_session
from console.webui.state import ConsoleState
from console.webui.templates import CONSOLE_HTML, FORGOT_PASSWORD_HTML, LOGIN_HTML, RESET_PASSWORD_HTML


SEARCH_PARAM = "q"


def _error(message: str, status_code: int, **extra: Any) -> JSONResponse:
    return JSONResponse({"error": message, **extra}, status_code=status_code)


def install_error_handlers(app: FastAPI) -> None:
    """Translate console error categories into JSON responses."""

    @app.exception_handler(ConfirmationRequired)
    async def _confirmation_required(request: Request, exc: ConfirmationRequired):
        return _error(str(exc), 409, confirm_required=True)

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError):
        return _error(str(exc), 400)

    @app.exception_handler(BackendError)
    async def _backend_error(request: Request, exc: BackendError):
        status_code = exc.status_code if 400 <= exc.status_code < 500 else 502
        return _error(str(exc), status_code)

    @app.exception_handler(NetworkError)
    async def _network_error(request: Request, exc: NetworkError):
        return _error(str(exc), 502)

    @app.exception_handler(NotImplementedError)
    async def _not_supported(request: Request, exc: NotImplementedError):
        return _error(str(exc) or "Operation not supported.", 405)


async def _read_json(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except Exception as e:
        raise ValidationError(f"Invalid JSON: {e}") from e
    if not isinstance(body, dict):
        raise ValidationError("Expected a JSON object.")
    return body


async def _read_form(request: Request) -> Tuple[Dict[str, Any], Dict[str, Upload]]:
    """Split a multipart submission into plain fields and selected files."""
    form = await request.form()
    fields: Dict[str, Any] = {}
    files: Dict[str, Upload] = {}
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            content = await value.read()
            if content:
                files[key] = Upload(
                    filename=value.filename or key,
                    content=content,
                    content_type=value.content_type or "application/octet-stream",
                )
        else:
            fields[key] = value
    return fields, files


def _list_view(request: Request, manager: ResourceManager, *reserved: str) -> Tuple[str, Dict[str, str]]:
    """Read the search term and filters a list view is showing.

    Parameters starting with "_" are cache busters and are ignored. Unknown
    filter names are rejected before any backend call.
    """
    filters = {
        k: v for k, v in request.query_params.items() if not k.startswith("_") and k not in reserved
    }
    search = filters.pop(SEARCH_PARAM, "")
    check_filters(filters, manager.spec.filters)
    return search, filters


def _list_extras(state: ConsoleState, name: str, items: List[Dict[str, Any]]) -> Dict[str, Any]:
    if name == "members":
        return {"plans": state.members.plans(items)}
    if name == "purchases":
        return {"itemTypes": state.purchases.item_types(items)}
    return {}


def create_console_router(state: ConsoleState) -> APIRouter:
    """Create the console views plus the JSON API they call.

    Handlers that reach the backend run in the threadpool: plain ``def``
    where no request body is read, ``run_in_threadpool`` otherwise.
    """
    store = state.token_store
    router = APIRouter()
    api = APIRouter(prefix="/api", dependencies=[Depends(require_session(store, api=True))])

    def _manager(name: str) -> ResourceManager:
        manager = state.manager(name)
        if manager is None:
            raise HTTPException(status_code=404, detail=f"Unknown resource '{name}'.")
        return manager

    def _listing(name: str, manager: ResourceManager, items: List[Dict[str, Any]], search: str, filters: Dict[str, str]):
        # Filter choices come from the whole collection, not the filtered view.
        shown = manager.filter(items, search, filters)
        return {"status": "ok", "items": shown, **_list_extras(state, name, items)}

    # ---------- public views ----------
    @router.get("/", include_in_schema=False)
    async def index():
        return RedirectResponse(DASHBOARD_PATH, status_code=303)

    @router.get("/login", response_class=HTMLResponse, include_in_schema=False)
    async def login_view():
        return redirect_if_logged_in(store) or HTMLResponse(content=LOGIN_HTML)

    @router.get("/forgot-password", response_class=HTMLResponse, include_in_schema=False)
    async def forgot_password_view():
        return HTMLResponse(content=FORGOT_PASSWORD_HTML)

    @router.get("/reset-password", response_class=HTMLResponse, include_in_schema=False)
    async def reset_password_view():
        return HTMLResponse(content=RESET_PASSWORD_HTML)

    @router.get("/health")
    async def health():
        return {
            "status": "ok",
            "uptime_seconds": int(time.time() - state.start_time),
            "backend": state.client.base_url,
            "logged_in": store.is_logged_in(),
            "polling": state.dashboard.running,
        }

    # ---------- auth ----------
    @router.post("/api/login")
    async def api_login(request: Request):
        body = await _read_json(request)
        profile = await run_in_threadpool(
            state.auth.login, body.get("username") or body.get("identifier") or "", body.get("password") or ""
        )
        state.events.add("Admin logged in", profile.get("username") or profile.get("email"))
        return {"status": "ok", "admin": profile, "redirect": DASHBOARD_PATH, "message": "Login successful! Redirecting..."}

    @router.post("/api/forgot-password")
    async def api_forgot_password(request: Request):
        body = await _read_json(request)
        email = await run_in_threadpool(state.auth.request_password_reset, body.get("email") or "")
        return {
            "status": "ok",
            "message": "OTP sent to your email! Please check your inbox.",
            "redirect": f"/reset-password?email={quote(email)}",
        }

    @router.post("/api/reset-password")
    async def api_reset_password(request: Request):
        body = await _read_json(request)
        await run_in_threadpool(
            state.auth.confirm_password_reset,
            body.get("email") or "",
            body.get("otp") or "",
            body.get("newPassword") or "",
            body.get("confirmPassword") or "",
        )
        return {"status": "ok", "message": "Password reset successfully! You can now log in.", "redirect": LOGIN_PATH}

    @router.post("/logout", include_in_schema=False)
    def logout():
        state.teardown()
        state.auth.logout()
        state.events.add("Admin logged out")
        return RedirectResponse(LOGIN_PATH, status_code=303)

    # ---------- guarded views ----------
    @router.get(
        DASHBOARD_PATH,
        response_class=HTMLResponse,
        include_in_schema=False,
        dependencies=[Depends(require_session(store))],
    )
    async def dashboard_view():
        return HTMLResponse(content=CONSOLE_HTML)

    # ---------- guarded API ----------
    @api.get("/session")
    async def api_session():
        return {"status": "ok", "admin": store.public_profile(), "assetBase": state.config.asset_base}

    @api.get("/settings")
    def api_settings_get():
        return {"status": "ok", "profile": state.auth.load_profile()}

    @api.put("/settings")
    async def api_settings_update(request: Request):
        body = await _read_json(request)
        form = SettingsForm(
            first_name=body.get("firstName") or "",
            last_name=body.get("lastName") or "",
            email=body.get("email") or "",
            current_password=body.get("currentPassword") or "",
            new_password=body.get("newPassword") or "",
            confirm_password=body.get("confirmPassword") or "",
        )
        result = await run_in_threadpool(state.auth.save_settings, form)
        state.events.add("Settings saved", "password changed" if result["password_changed"] else "profile only")
        return {"status": "ok", **result}

    @api.get("/dashboard")
    def api_dashboard():
        return {
            "status": "ok",
            "interval_seconds": state.dashboard.interval,
            "widgets": state.dashboard.ensure_running(),
            "events": state.events.snapshot()[:12],
        }

    @api.post("/dashboard/stop")
    def api_dashboard_stop():
        state.dashboard.stop()
        return {"status": "ok", "polling": state.dashboard.running}

    @api.get("/logs")
    async def api_logs():
        return {
            "status": "ok",
            "events": state.events.snapshot(),
            "persisted": bool(state.events.path),
            "path": state.events.path,
        }

    @api.get("/videos/categories")
    def api_video_categories():
        return {"status": "ok", "categories": state.videos.categories()}

    @api.get("/videos/{video_id}/signed-url")
    def api_video_signed_url(video_id: str):
        return {"status": "ok", "signedUrl": state.previews.video_signed_url(video_id)}

    @api.post("/ebooks/{ebook_id}/preview")
    async def api_ebook_preview(ebook_id: str, request: Request):
        body = await _read_json(request)
        obj = await run_in_threadpool(state.previews.open_ebook, ebook_id, body.get("title") or "", body.get("mimeType"))
        return {"status": "ok", **obj.describe()}

    @api.post("/certificates/{certificate_id}/preview")
    async def api_certificate_preview(certificate_id: str, request: Request):
        body = await _read_json(request)
        obj = await run_in_threadpool(state.previews.open_certificate, certificate_id, body.get("title") or "")
        return {"status": "ok", **obj.describe()}

    @api.get("/previews/{key}")
    async def api_preview_get(key: str):
        obj = state.previews.get(key)
        if obj is None:
            raise HTTPException(status_code=404, detail="Preview not found or already closed.")
        return Response(content=obj.content, media_type=obj.mime_type)

    @api.delete("/previews/{key}")
    async def api_preview_revoke(key: str):
        return {"status": "ok", "revoked": state.previews.revoke(key)}

    @api.put("/members/{member_id}/status")
    async def api_member_status(member_id: str, request: Request):
        search, filters = _list_view(request, state.members)
        body = await _read_json(request)
        items = await run_in_threadpool(
            state.members.update_status, member_id, body.get("status") or "", as_bool(body.get("confirm"))
        )
        return _listing("members", state.members, items, search, filters)

    @api.post("/receipts/{receipt_id}/approve")
    def api_receipt_approve(receipt_id: str, request: Request):
        search, filters = _list_view(request, state.receipts)
        receipt = state.receipts.approve(receipt_id)
        return {"status": "ok", "receipt": receipt, "items": state.receipts.cached(search, filters)}

    @api.post("/receipts/{receipt_id}/reject")
    def api_receipt_reject(receipt_id: str, request: Request):
        search, filters = _list_view(request, state.receipts)
        receipt = state.receipts.reject(receipt_id)
        return {"status": "ok", "receipt": receipt, "items": state.receipts.cached(search, filters)}

    @api.get("/{resource}")
    def api_resource_list(resource: str, request: Request):
        manager = _manager(resource)
        search, filters = _list_view(request, manager)
        items = manager.fetch()
        dlog("resource_list", {"resource": resource, "search": search, "filters": filters, "count": len(items)})
        return _listing(resource, manager, items, search, filters)

    @api.post("/{resource}")
    async def api_resource_create(resource: str, request: Request):
        manager = _manager(resource)
        search, filters = _list_view(request, manager)
        fields, files = await _read_form(request)
        items = await run_in_threadpool(manager.create, fields, files)
        return _listing(resource, manager, items, search, filters)

    @api.put("/{resource}/{item_id}")
    async def api_resource_update(resource: str, item_id: str, request: Request):
        manager = _manager(resource)
        search, filters = _list_view(request, manager)
        fields, files = await _read_form(request)
        items = await run_in_threadpool(manager.update, item_id, fields, files)
        return _listing(resource, manager, items, search, filters)

    @api.delete("/{resource}/{item_id}")
    def api_resource_delete(resource: str, item_id: str, request: Request, confirm: bool = False):
        manager = _manager(resource)
        search, filters = _list_view(request, manager, "confirm")
        items = manager.delete(item_id, confirmed=confirm)
        return _listing(resource, manager, items, search, filters)

    router.include_router(api)
    return router
