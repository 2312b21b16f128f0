import pytest

from console.backend_client import ConfirmationRequired, ValidationError
from console.commerce import PLAN_SPEC, PURCHASE_SPEC, RECEIPT_SPEC, PurchaseLedger, ReceiptDesk
from console.content import CERTIFICATE_SPEC, EBOOK_SPEC, VIDEO_SPEC, EbookShelf, VideoLibrary, apply_ebook_pricing
from console.members import MEMBER_SPEC, MemberDirectory
from console.resources import ResourceManager, Upload


VIDEOS = [
    {"_id": "v1", "title": "Morning Mobility", "category": {"_id": "c1", "name": "Strength"}, "forMembersOnly": True},
    {"_id": "v2", "title": "HIIT Blast", "category": {"_id": "c2", "name": "Cardio"}},
]

MEMBERS = [
    {
        "_id": "u1",
        "firstName": "Ana",
        "lastName": "Lopez",
        "email": "ana@example.com",
        "membership": {"paymentStatus": "paid", "plan": {"name": "Gold"}},
    },
    {"_id": "u2", "firstName": "Ben", "lastName": "Stone", "email": "ben@example.com", "membership": None},
]


def _pdf(name="book.pdf"):
    return Upload(filename=name, content=b"%PDF-1.4", content_type="application/pdf")


def _png(name="cover.png"):
    return Upload(filename=name, content=b"\x89PNG", content_type="image/png")


def test_search_is_case_insensitive_and_blank_matches_all(backend, client):
    backend.on("GET", "/workout-library", {"videos": VIDEOS})
    videos = VideoLibrary(client, VIDEO_SPEC)

    assert [v["_id"] for v in videos.list("STRENGTH")] == ["v1"]
    assert [v["_id"] for v in videos.list("hiit")] == ["v2"]
    assert len(videos.list("")) == 2
    assert len(videos.list("   ")) == 2
    assert videos.list("yoga") == []


def test_filters_compare_case_insensitively(backend, client):
    backend.on("GET", "/workout-library", {"videos": VIDEOS})
    videos = VideoLibrary(client, VIDEO_SPEC)

    assert [v["_id"] for v in videos.list(filters={"category": "C2"})] == ["v2"]
    assert videos.list(filters={"category": ""})[0]["visibility"] == "Members Only"
    with pytest.raises(ValidationError, match="Unknown filter"):
        videos.list(filters={"level": "beginner"})


def test_unknown_filter_rejected_even_for_empty_collection(backend, client):
    backend.on("GET", "/workout-library", {"videos": []})
    videos = VideoLibrary(client, VIDEO_SPEC)

    assert videos.list(filters={"category": "c1"}) == []
    with pytest.raises(ValidationError, match="Unknown filter 'level'"):
        videos.list(filters={"level": "beginner"})


def test_delete_requires_confirmation_then_refetches(backend, client):
    backend.on("GET", "/certificates", {"certificates": [{"_id": "c1", "name": "CPR"}]})
    backend.on("DELETE", "/certificates/c1", {"msg": "Deleted"})
    events = []
    certificates = ResourceManager(client, CERTIFICATE_SPEC, lambda title, detail=None: events.append(title))

    with pytest.raises(ConfirmationRequired):
        certificates.delete("c1")
    assert backend.calls_to("DELETE", "/certificates/c1") == []

    items = certificates.delete("c1", confirmed=True)
    assert items == [{"_id": "c1", "name": "CPR"}]
    assert [c.method for c in backend.calls] == ["DELETE", "GET"]
    assert events == ["Certificate deleted"]


def test_free_ebook_is_submitted_with_zero_price(backend, client):
    backend.on("POST", "/ebooks", {"msg": "Created"})
    backend.on("GET", "/ebooks", {"ebooks": [{"_id": "e1", "title": "Guide", "isFree": True}]})
    ebooks = EbookShelf(client, EBOOK_SPEC)

    items = ebooks.create(
        {"title": "Guide", "price": "19.99", "isFree": "true", "forMembersOnly": "false"},
        {"ebook": _pdf(), "cover": _png()},
    )

    call = backend.calls_to("POST", "/ebooks")[0]
    assert call.kwargs["data"]["price"] == "0"
    assert call.kwargs["data"]["isFree"] == "true"
    assert call.kwargs["data"]["forMembersOnly"] == "false"
    assert set(call.kwargs["files"]) == {"ebook", "cover"}
    assert items[0]["pricing"] == "Free"
    assert len(backend.calls_to("GET", "/ebooks")) == 1


def test_ebook_pricing_rules():
    assert apply_ebook_pricing({"price": "", "isFree": "false"})["price"] == "0"
    assert apply_ebook_pricing({"price": "4.50", "isFree": "false"})["price"] == "4.50"
    with pytest.raises(ValidationError):
        apply_ebook_pricing({"price": "-1"})
    with pytest.raises(ValidationError):
        apply_ebook_pricing({"price": "cheap"})


def test_uploads_are_validated_before_any_request(backend, client):
    ebooks = EbookShelf(client, EBOOK_SPEC)
    gif = Upload(filename="cover.gif", content=b"GIF89a", content_type="image/gif")

    with pytest.raises(ValidationError, match="Cover image must be one of"):
        ebooks.create({"title": "Guide"}, {"ebook": _pdf(), "cover": gif})
    with pytest.raises(ValidationError, match="Cover image is required"):
        ebooks.create({"title": "Guide"}, {"ebook": _pdf()})
    with pytest.raises(ValidationError, match="Title is required"):
        ebooks.create({"title": "  "}, {"ebook": _pdf(), "cover": _png()})

    videos = VideoLibrary(client, VIDEO_SPEC)
    with pytest.raises(ValidationError, match="Video file is required"):
        videos.create({"title": "Stretch"}, {})
    assert backend.calls == []


def test_update_without_new_files_is_allowed(backend, client):
    backend.on("PUT", "/certificates/c1", {"msg": "Updated"})
    backend.on("GET", "/certificates", {"certificates": [{"_id": "c1", "name": "CPR Level 2"}]})
    certificates = ResourceManager(client, CERTIFICATE_SPEC)

    items = certificates.update("c1", {"name": "CPR Level 2", "description": ""})

    call = backend.calls_to("PUT", "/certificates/c1")[0]
    assert call.kwargs["data"] == {"name": "CPR Level 2", "description": ""}
    assert "files" not in call.kwargs
    assert items[0]["name"] == "CPR Level 2"


def test_read_only_resources_reject_mutations(client):
    plans = ResourceManager(client, PLAN_SPEC)
    with pytest.raises(NotImplementedError):
        plans.create({"name": "Gold"})
    with pytest.raises(NotImplementedError):
        MemberDirectory(client, MEMBER_SPEC).delete("u1", confirmed=True)


def test_members_without_membership_are_inactive_and_locked(backend, client):
    backend.on("GET", "/users", {"users": MEMBERS})
    members = MemberDirectory(client, MEMBER_SPEC)

    items = members.list()
    assert [m["displayStatus"] for m in items] == ["Paid", "Inactive"]
    assert [m["statusLocked"] for m in items] == [False, True]
    assert members.plans(items) == ["Gold"]
    assert [m["_id"] for m in members.list(filters={"status": "INACTIVE"})] == ["u2"]
    assert [m["_id"] for m in members.list("lopez", {"plan": "gold"})] == ["u1"]

    with pytest.raises(ValidationError, match="no active membership"):
        members.update_status("u2", "paid")


def test_unrecognised_payment_status_is_inactive_and_locked(backend, client):
    backend.on(
        "GET",
        "/users",
        {
            "users": [
                {"_id": "u3", "email": "cy@example.com", "membership": {"paymentStatus": "active"}},
                {"_id": "u4", "email": "di@example.com", "membership": {"paymentStatus": ""}},
                {"_id": "u5", "email": "ed@example.com", "membership": {"paymentStatus": "Inactive"}},
            ]
        },
    )
    members = MemberDirectory(client, MEMBER_SPEC)

    items = members.list()
    assert [m["displayStatus"] for m in items] == ["Inactive", "Inactive", "Inactive"]
    assert [m["statusLocked"] for m in items] == [True, True, False]

    with pytest.raises(ValidationError, match="no active membership"):
        members.update_status("u3", "paid")
    assert backend.calls_to("PUT", "/members/u3") == []


def test_member_inactive_status_needs_confirmation(backend, client):
    backend.on("GET", "/users", {"users": MEMBERS})
    backend.on("PUT", "/members/u1", {"msg": "Updated"})
    members = MemberDirectory(client, MEMBER_SPEC)

    with pytest.raises(ConfirmationRequired):
        members.update_status("u1", "inactive")
    assert backend.calls_to("PUT", "/members/u1") == []

    members.update_status("u1", "Inactive", confirmed=True)
    assert backend.calls_to("PUT", "/members/u1")[0].kwargs["json"] == {"paymentStatus": "inactive"}

    with pytest.raises(ValidationError, match="Status must be one of"):
        members.update_status("u1", "refunded")


def test_purchases_sorted_newest_first_with_deleted_users(backend, client):
    backend.on(
        "GET",
        "/purchases",
        {
            "purchases": [
                {"_id": "p1", "itemName": "Guide", "itemType": "ebook", "date": "2024-01-02", "user": None},
                {
                    "_id": "p2",
                    "itemName": "Gold",
                    "itemType": "plan",
                    "date": "2024-03-01",
                    "stripePaymentId": "pi_123",
                    "user": {"firstName": "Ana", "lastName": "Lopez", "email": "ana@example.com"},
                },
            ]
        },
    )
    purchases = PurchaseLedger(client, PURCHASE_SPEC)

    items = purchases.list()
    assert [p["_id"] for p in items] == ["p2", "p1"]
    assert items[1]["customer"] == "Deleted User"
    assert purchases.item_types(items) == ["ebook", "plan"]
    assert [p["_id"] for p in purchases.list("PI_123")] == ["p2"]
    assert [p["_id"] for p in purchases.list(filters={"itemType": "EBOOK"})] == ["p1"]


def test_receipt_review_updates_entry_without_refetch(backend, client):
    backend.on(
        "GET",
        "/receipts",
        {"receipts": [{"_id": "r1", "status": "pending", "priceId": "price_1"}, {"_id": "r2", "status": "pending"}]},
    )
    backend.on("POST", "/receipts/r1/approve", {"msg": "Approved"})
    backend.on("POST", "/receipts/r2/reject", {"msg": "Rejected"})
    receipts = ReceiptDesk(client, RECEIPT_SPEC)
    receipts.list()

    assert receipts.approve("r1")["status"] == "approved"
    assert receipts.reject("r2")["status"] == "rejected"
    assert len(backend.calls_to("GET", "/receipts")) == 1
    assert [r["status"] for r in receipts.cached()] == ["approved", "rejected"]
    assert [r["_id"] for r in receipts.cached(filters={"status": "approved"})] == ["r1"]
