from __future__ import annotations

from typing import Any, Dict, List

from console.backend_client import ValidationError
from console.resources import (
    FileField,
    ResourceManager,
    ResourceSpec,
    attr,
    as_bool,
)


IMAGE_TYPES = ("image/jpeg", "image/png")
VIDEO_TYPES = ("video/mp4", "video/quicktime", "video/x-msvideo", "video/webm")


def apply_ebook_pricing(form: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize ebook pricing: a free ebook is always submitted with price 0."""
    values = dict(form)
    is_free = as_bool(values.get("isFree"))
    values["isFree"] = is_free
    values["forMembersOnly"] = as_bool(values.get("forMembersOnly"))
    raw_price = str(values.get("price") or "").strip()
    if is_free or not raw_price:
        values["price"] = "0"
        return values
    try:
        price = float(raw_price)
    except ValueError:
        raise ValidationError("Price must be a number")
    if price < 0:
        raise ValidationError("Price cannot be negative")
    values["price"] = raw_price
    return values


def _visibility_flags(form: Dict[str, Any]) -> Dict[str, Any]:
    values = dict(form)
    values["forMembersOnly"] = as_bool(values.get("forMembersOnly"))
    return values


VIDEO_SPEC = ResourceSpec(
    name="videos",
    label="Video",
    endpoint="/workout-library",
    collection_key="videos",
    search=(attr("title"), attr("category.name")),
    filters={"category": attr("category._id")},
    required_fields=("title",),
    file_fields=(
        FileField("video", "Video file", VIDEO_TYPES, required_on_create=True),
        FileField("thumbnail", "Thumbnail", IMAGE_TYPES + ("image/webp",)),
    ),
    prepare_form=_visibility_flags,
)

EBOOK_SPEC = ResourceSpec(
    name="ebooks",
    label="E-Book",
    endpoint="/ebooks",
    collection_key="ebooks",
    search=(attr("title"),),
    required_fields=("title",),
    file_fields=(
        FileField("ebook", "Ebook file", ("application/pdf",) + IMAGE_TYPES, required_on_create=True),
        FileField("cover", "Cover image", IMAGE_TYPES, required_on_create=True),
    ),
    prepare_form=apply_ebook_pricing,
)

CERTIFICATE_SPEC = ResourceSpec(
    name="certificates",
    label="Certificate",
    endpoint="/certificates",
    collection_key="certificates",
    search=(attr("name"),),
    required_fields=("name",),
    file_fields=(
        FileField("file", "Certificate PDF", ("application/pdf",), required_on_create=True),
        FileField("thumb", "Cover", IMAGE_TYPES, required_on_create=True),
    ),
)


class VideoLibrary(ResourceManager):
    """Workout videos, plus the category list used by filters and forms."""

    def categories(self) -> List[Dict[str, Any]]:
        data = self.client.get_json("/workout-categories")
        categories = data.get("categories")
        return categories if isinstance(categories, list) else []

    def decorate(self, item: Dict[str, Any]) -> Dict[str, Any]:
        item = dict(item)
        item["visibility"] = "Members Only" if item.get("forMembersOnly") else "Public"
        return item


class EbookShelf(ResourceManager):
    def decorate(self, item: Dict[str, Any]) -> Dict[str, Any]:
        item = dict(item)
        item["visibility"] = "Members Only" if item.get("forMembersOnly") else "Public"
        item["pricing"] = "Free" if item.get("isFree") else "Paid"
        return item

