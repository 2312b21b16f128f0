import requests


def test_guard_redirects_pages_and_rejects_api(console_app):
    _, client = console_app()

    resp = client.get("/dashboard", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/login"

    resp = client.get("/api/videos")
    assert resp.status_code == 401
    assert resp.json()["detail"]["redirect"] == "/login"

    resp = client.get("/login")
    assert resp.status_code == 200
    assert "Forgot password?" in resp.text


def test_any_stored_token_passes_the_guard(console_app, backend):
    module, client = console_app()
    module.console_state.token_store.store_session("not-checked", {})

    resp = client.get("/dashboard")
    assert resp.status_code == 200
    assert "FitCoach Admin" in resp.text
    assert backend.calls == []

    resp = client.get("/login", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/dashboard"


def test_login_flow_and_logout(console_app, backend):
    backend.on("POST", "/admin/login", {"msg": "Invalid credentials"}, status=400)
    module, client = console_app()

    resp = client.post("/api/login", json={"username": "coach", "password": "bad"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid credentials"
    assert client.get("/dashboard", follow_redirects=False).status_code == 303

    backend.on("POST", "/admin/login", {"token": "t-1", "admin": {"username": "coach"}})
    resp = client.post("/api/login", json={"username": "coach", "password": "good"})
    assert resp.status_code == 200
    assert resp.json()["redirect"] == "/dashboard"
    assert client.get("/api/session").json()["admin"]["username"] == "coach"

    resp = client.post("/logout", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/login"
    assert module.console_state.token_store.is_logged_in() is False


def test_forgot_password_redirects_with_email(console_app, backend):
    backend.on("POST", "/admin/forgot-password", {"msg": "OTP sent"})
    _, client = console_app()

    resp = client.post("/api/forgot-password", json={"email": "coach@example.com"})
    assert resp.status_code == 200
    assert resp.json()["redirect"] == "/reset-password?email=coach%40example.com"

    resp = client.post(
        "/api/reset-password",
        json={"email": "coach@example.com", "otp": "123456", "newPassword": "a", "confirmPassword": "b"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Passwords do not match!"
    assert backend.calls_to("POST", "/admin/reset-password") == []


def test_resource_listing_and_delete_confirmation(console_app, backend):
    backend.on("GET", "/ebooks", {"ebooks": [{"_id": "e1", "title": "Meal Prep"}, {"_id": "e2", "title": "Stretching"}]})
    backend.on("DELETE", "/ebooks/e1", {"msg": "Deleted"})
    module, client = console_app()
    module.console_state.token_store.store_session("t", {})

    resp = client.get("/api/ebooks", params={"q": "MEAL"})
    assert [i["_id"] for i in resp.json()["items"]] == ["e1"]

    resp = client.delete("/api/ebooks/e1")
    assert resp.status_code == 409
    assert resp.json()["confirm_required"] is True
    assert backend.calls_to("DELETE", "/ebooks/e1") == []

    resp = client.delete("/api/ebooks/e1", params={"confirm": "true"})
    assert resp.status_code == 200
    assert len(backend.calls_to("DELETE", "/ebooks/e1")) == 1

    assert client.post("/api/plans", data={"name": "Gold"}).status_code == 405
    assert client.get("/api/nothing").status_code == 404


def test_multipart_create_passes_files_through(console_app, backend):
    backend.on("POST", "/certificates", {"msg": "Created"})
    backend.on("GET", "/certificates", {"certificates": [{"_id": "c1", "name": "CPR"}]})
    module, client = console_app()
    module.console_state.token_store.store_session("t", {})

    resp = client.post(
        "/api/certificates",
        data={"name": "CPR", "description": "First aid"},
        files={
            "file": ("cpr.pdf", b"%PDF-1.4", "application/pdf"),
            "thumb": ("cpr.png", b"\x89PNG", "image/png"),
        },
    )
    assert resp.status_code == 200
    call = backend.calls_to("POST", "/certificates")[0]
    assert call.kwargs["data"] == {"name": "CPR", "description": "First aid"}
    assert call.kwargs["files"]["file"] == ("cpr.pdf", b"%PDF-1.4", "application/pdf")

    resp = client.post(
        "/api/certificates",
        data={"name": "CPR"},
        files={"file": ("cpr.txt", b"text", "text/plain"), "thumb": ("cpr.png", b"\x89PNG", "image/png")},
    )
    assert resp.status_code == 400
    assert "Certificate PDF" in resp.json()["error"]


def test_network_failure_is_reported_generically(console_app, backend):
    backend.fail("GET", "/workout-library", requests.ConnectionError("refused"))
    module, client = console_app()
    module.console_state.token_store.store_session("t", {})

    resp = client.get("/api/videos")
    assert resp.status_code == 502
    assert resp.json()["error"] == "Something went wrong"


def test_preview_served_until_closed(console_app, backend):
    backend.on("GET", "/certificates/c1/admin-fetch", content=b"%PDF-1.4", headers={"Content-Type": "application/pdf"})
    module, client = console_app()
    module.console_state.token_store.store_session("t", {})

    preview = client.post("/api/certificates/c1/preview", json={"title": "CPR"}).json()
    resp = client.get(preview["url"])
    assert resp.status_code == 200
    assert resp.content == b"%PDF-1.4"
    assert resp.headers["content-type"].startswith("application/pdf")

    assert client.delete(preview["url"]).json()["revoked"] is True
    assert client.get(preview["url"]).status_code == 404


def test_member_status_and_receipt_review_endpoints(console_app, backend):
    backend.on(
        "GET",
        "/users",
        {"users": [{"_id": "u1", "email": "ana@example.com", "membership": {"paymentStatus": "pending"}}]},
    )
    backend.on("PUT", "/members/u1", {"msg": "Updated"})
    backend.on("GET", "/receipts", {"receipts": [{"_id": "r1", "status": "pending"}]})
    backend.on("POST", "/receipts/r1/approve", {"msg": "Approved"})
    module, client = console_app()
    module.console_state.token_store.store_session("t", {})

    resp = client.put("/api/members/u1/status", json={"status": "inactive"})
    assert resp.status_code == 409
    resp = client.put("/api/members/u1/status", json={"status": "inactive", "confirm": True})
    assert resp.status_code == 200
    assert backend.calls_to("PUT", "/members/u1")[0].kwargs["json"] == {"paymentStatus": "inactive"}

    client.get("/api/receipts")
    resp = client.post("/api/receipts/r1/approve")
    assert resp.json()["receipt"]["status"] == "approved"
    assert len(backend.calls_to("GET", "/receipts")) == 1

    titles = [e["title"] for e in client.get("/api/logs").json()["events"]]
    assert "Receipt approved" in titles
    assert "Member status updated" in titles


def test_dashboard_endpoint_and_health(console_app, backend):
    backend.on("GET", "/dashboard-data/stats", {"activeMembers": 3})
    backend.on("GET", "/dashboard-data/recent-members", {"members": []})
    backend.on("GET", "/dashboard-data/recent-purchases", {"purchases": []})
    module, client = console_app()
    module.console_state.token_store.store_session("t", {})

    data = client.get("/api/dashboard").json()
    assert data["widgets"]["stats"]["data"] == {"activeMembers": 3}
    assert client.post("/api/dashboard/stop").json()["polling"] is False

    health = client.get("/health").json()
    assert health["status"] == "ok"
    assert health["backend"] == "http://backend.test/api"


def test_list_query_params_never_crash(console_app, backend):
    backend.on("GET", "/workout-library", {"videos": [{"_id": "v1", "title": "Leg Day", "category": {"_id": "c1"}}]})
    module, client = console_app()
    module.console_state.token_store.store_session("t", {})

    resp = client.get("/api/videos", params={"search": "leg"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Unknown filter 'search'."

    resp = client.get("/api/videos", params={"self": "x"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Unknown filter 'self'."

    resp = client.get("/api/videos", params={"q": "LEG", "category": "C1", "_": "123"})
    assert resp.status_code == 200
    assert [v["_id"] for v in resp.json()["items"]] == ["v1"]


def test_bad_filter_is_rejected_before_mutation(console_app, backend):
    backend.on("DELETE", "/ebooks/e1", {"msg": "Deleted"})
    module, client = console_app()
    module.console_state.token_store.store_session("t", {})

    resp = client.delete("/api/ebooks/e1", params={"confirm": "true", "level": "x"})
    assert resp.status_code == 400
    assert backend.calls == []


def test_mutation_returns_collection_as_currently_shown(console_app, backend):
    backend.on("POST", "/certificates", {"msg": "Created"})
    backend.on(
        "GET",
        "/certificates",
        {"certificates": [{"_id": "c1", "name": "CPR"}, {"_id": "c2", "name": "Nutrition Coach"}]},
    )
    module, client = console_app()
    module.console_state.token_store.store_session("t", {})

    resp = client.post(
        "/api/certificates",
        params={"q": "nutrition"},
        data={"name": "Nutrition Coach"},
        files={
            "file": ("n.pdf", b"%PDF-1.4", "application/pdf"),
            "thumb": ("n.png", b"\x89PNG", "image/png"),
        },
    )
    assert resp.status_code == 200
    assert [c["_id"] for c in resp.json()["items"]] == ["c2"]
    assert len(backend.calls_to("GET", "/certificates")) == 1


def test_member_status_response_keeps_plan_choices(console_app, backend):
    backend.on(
        "GET",
        "/users",
        {
            "users": [
                {"_id": "u1", "email": "ana@example.com", "membership": {"paymentStatus": "pending", "plan": {"name": "Gold"}}},
                {"_id": "u2", "email": "ben@example.com", "membership": {"paymentStatus": "paid", "plan": {"name": "Silver"}}},
            ]
        },
    )
    backend.on("PUT", "/members/u1", {"msg": "Updated"})
    module, client = console_app()
    module.console_state.token_store.store_session("t", {})

    resp = client.put("/api/members/u1/status", params={"plan": "gold"}, json={"status": "paid"})
    data = resp.json()
    assert [m["_id"] for m in data["items"]] == ["u1"]
    assert data["plans"] == ["Gold", "Silver"]


def test_backend_bound_handlers_run_off_the_event_loop(console_app):
    import inspect

    module, _ = console_app()
    endpoints = {
        (route.path, tuple(sorted(route.methods))): route.endpoint
        for route in module.app.routes
        if getattr(route, "methods", None)
    }
    for key in [
        ("/api/dashboard", ("GET",)),
        ("/api/{resource}", ("GET",)),
        ("/api/{resource}/{item_id}", ("DELETE",)),
        ("/api/videos/categories", ("GET",)),
        ("/api/receipts/{receipt_id}/approve", ("POST",)),
    ]:
        assert not inspect.iscoroutinefunction(endpoints[key]), key
