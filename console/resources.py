"""Generic list/create/update/delete management for backend collections.

Every resource screen of the console follows the same shape: fetch the whole
collection, filter it locally, and send create/update/delete requests that
are followed by a full re-fetch. ``ResourceSpec`` describes one resource;
``ResourceManager`` runs the shape against the backend.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional, Tuple

from console.backend_client import BackendClient, ConfirmationRequired, ValidationError
from console.config import dlog


Accessor = Callable[[Dict[str, Any]], Any]
EventHook = Callable[[str, Optional[str]], None]

ALL_OPERATIONS = frozenset({"list", "create", "update", "delete"})
READ_ONLY = frozenset({"list"})


def field_value(item: Dict[str, Any], path: str) -> Any:
    """Resolve a dotted path ("category.name") against a nested record."""
    value: Any = item
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def attr(path: str) -> Accessor:
    return lambda item: field_value(item, path)


def full_name(path: str) -> Accessor:
    """Accessor for "<firstName> <lastName>" of a nested person record."""

    def accessor(item: Dict[str, Any]) -> str:
        person = field_value(item, path) if path else item
        if not isinstance(person, dict):
            return ""
        return f"{person.get('firstName') or ''} {person.get('lastName') or ''}".strip()

    return accessor


def matches_search(item: Dict[str, Any], term: Optional[str], accessors: Tuple[Accessor, ...]) -> bool:
    """Case-insensitive substring match of term against any accessor value."""
    needle = (term or "").strip().lower()
    if not needle:
        return True
    for accessor in accessors:
        value = accessor(item)
        if value is not None and needle in str(value).lower():
            return True
    return False


def check_filters(wanted: Mapping[str, Optional[str]], filters: Mapping[str, Accessor]) -> None:
    for name in wanted:
        if name not in filters:
            raise ValidationError(f"Unknown filter '{name}'.")


def matches_filters(item: Dict[str, Any], wanted: Mapping[str, Optional[str]], filters: Mapping[str, Accessor]) -> bool:
    for name, expected in wanted.items():
        if expected in (None, ""):
            continue
        value = filters[name](item)
        if value is None or str(value).lower() != str(expected).lower():
            return False
    return True


def as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Upload:
    """A file selected in a form, passed through opaquely to the backend."""

    filename: str
    content: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class FileField:
    name: str
    label: str
    mime_types: Tuple[str, ...]
    required_on_create: bool = False
    required_on_update: bool = False

    def accepts(self, content_type: str) -> bool:
        content_type = (content_type or "").split(";")[0].strip().lower()
        for allowed in self.mime_types:
            if allowed.endswith("/*"):
                if content_type.startswith(allowed[:-1]):
                    return True
            elif content_type == allowed:
                return True
        return False

    def check(self, upload: Optional[Upload], creating: bool) -> None:
        if upload is None or not upload.content:
            required = self.required_on_create if creating else self.required_on_update
            if required:
                raise ValidationError(f"{self.label} is required")
            return
        if not self.accepts(upload.content_type):
            raise ValidationError(f"{self.label} must be one of: {', '.join(self.mime_types)}")


@dataclass(frozen=True)
class ResourceSpec:
    name: str
    label: str
    endpoint: str
    collection_key: str
    search: Tuple[Accessor, ...] = ()
    filters: Mapping[str, Accessor] = field(default_factory=dict)
    required_fields: Tuple[str, ...] = ()
    file_fields: Tuple[FileField, ...] = ()
    operations: FrozenSet[str] = ALL_OPERATIONS
    prepare_form: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]] = None
    sort_key: Optional[Accessor] = None
    sort_desc: bool = False


class ResourceManager:
    def __init__(self, client: BackendClient, spec: ResourceSpec, on_event: Optional[EventHook] = None) -> None:
        self.client = client
        self.spec = spec
        self._on_event = on_event

    def _require(self, operation: str) -> None:
        if operation not in self.spec.operations:
            raise NotImplementedError(f"{self.spec.label} does not support {operation}.")

    def _record(self, title: str, detail: Optional[str] = None) -> None:
        if self._on_event:
            self._on_event(title, detail)

    def _item_url(self, item_id: str) -> str:
        if not item_id:
            raise ValidationError(f"{self.spec.label} id is required.")
        return f"{self.spec.endpoint}/{item_id}"

    def fetch(self) -> List[Dict[str, Any]]:
        """Fetch the full collection from the backend."""
        self._require("list")
        data = self.client.get_json(self.spec.endpoint)
        items = data.get(self.spec.collection_key)
        if items is None:
            items = data.get("data")
        if not isinstance(items, list):
            items = []
        items = [self.decorate(item) for item in items if isinstance(item, dict)]
        if self.spec.sort_key is not None:
            items.sort(key=lambda item: str(self.spec.sort_key(item) or ""), reverse=self.spec.sort_desc)
        dlog("resource_fetched", {"resource": self.spec.name, "count": len(items)})
        return items

    def decorate(self, item: Dict[str, Any]) -> Dict[str, Any]:
        return item

    def filter(
        self,
        items: List[Dict[str, Any]],
        search: Optional[str] = "",
        filters: Optional[Mapping[str, Optional[str]]] = None,
    ) -> List[Dict[str, Any]]:
        filters = filters or {}
        check_filters(filters, self.spec.filters)
        return [
            item
            for item in items
            if matches_search(item, search, self.spec.search) and matches_filters(item, filters, self.spec.filters)
        ]

    def list(self, search: Optional[str] = "", filters: Optional[Mapping[str, Optional[str]]] = None) -> List[Dict[str, Any]]:
        return self.filter(self.fetch(), search, filters)

    def _build_payload(
        self, form: Mapping[str, Any], files: Mapping[str, Upload], creating: bool
    ) -> Tuple[Dict[str, str], Dict[str, Tuple[str, bytes, str]]]:
        values: Dict[str, Any] = {k: v for k, v in form.items() if k not in {f.name for f in self.spec.file_fields}}
        for name in self.spec.required_fields:
            raw = values.get(name)
            if raw is None or not str(raw).strip():
                raise ValidationError(f"{name.capitalize()} is required")
        for file_field in self.spec.file_fields:
            file_field.check(files.get(file_field.name), creating)
        if self.spec.prepare_form is not None:
            values = self.spec.prepare_form(values)

        data: Dict[str, str] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, bool):
                data[key] = "true" if value else "false"
            else:
                data[key] = str(value)
        multipart: Dict[str, Tuple[str, bytes, str]] = {}
        for file_field in self.spec.file_fields:
            upload = files.get(file_field.name)
            if upload is not None and upload.content:
                multipart[file_field.name] = (upload.filename, upload.content, upload.content_type)
        return data, multipart

    def create(self, form: Mapping[str, Any], files: Optional[Mapping[str, Upload]] = None) -> List[Dict[str, Any]]:
        self._require("create")
        data, multipart = self._build_payload(form, files or {}, creating=True)
        self.client.request_json(
            "POST",
            self.spec.endpoint,
            data=data,
            files=multipart,
            fallback_error=f"Failed to upload {self.spec.label.lower()}",
        )
        self._record(f"{self.spec.label} created", data.get("title") or data.get("name"))
        return self.fetch()

    def update(self, item_id: str, form: Mapping[str, Any], files: Optional[Mapping[str, Upload]] = None) -> List[Dict[str, Any]]:
        self._require("update")
        url = self._item_url(item_id)
        data, multipart = self._build_payload(form, files or {}, creating=False)
        self.client.request_json(
            "PUT",
            url,
            data=data,
            files=multipart,
            fallback_error=f"Failed to update {self.spec.label.lower()}",
        )
        self._record(f"{self.spec.label} updated", data.get("title") or data.get("name") or item_id)
        return self.fetch()

    def delete(self, item_id: str, confirmed: bool = False) -> List[Dict[str, Any]]:
        self._require("delete")
        url = self._item_url(item_id)
        if not confirmed:
            raise ConfirmationRequired(
                f"Are you sure you want to delete this {self.spec.label.lower()}? This action cannot be undone."
            )
        self.client.delete(url, fallback_error=f"Failed to delete {self.spec.label.lower()}")
        self._record(f"{self.spec.label} deleted", item_id)
        return self.fetch()
