"""
Generic CRUD lifecycle for one collection.

A panel mirrors a whole collection in memory (the snapshot) and only ever
replaces it by reloading after the data store has acknowledged a mutation.
Failures never raise out of a panel: they become a notification plus a
PanelResult the caller can turn into an HTTP error.
"""

import logging
import threading
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Hashable, Iterable, Optional, Union
from uuid import UUID

from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from app.core.config import settings
from app.core.sanitization import is_blank, normalize_optional, sanitize_description
from app.services.client import ServiceClient

logger = logging.getLogger(__name__)

DEFAULT = "default"
DESTRUCTIVE = "destructive"

# PanelResult.error_kind
VALIDATION = "validation"
REMOTE = "remote"
CONFLICT = "conflict"

SUCCESS_TITLE = "Succès"
ERROR_TITLE = "Erreur"

# Toast texts, French like the rest of the console. Panels override the
# entries that name their entity.
DEFAULT_MESSAGES = {
    "load_failed": "Échec du chargement des éléments",
    "required": "Champs obligatoires manquants : {fields}",
    "invalid": "Valeur invalide pour {field} : {error}",
    "created": "Élément créé avec succès",
    "updated": "Élément mis à jour avec succès",
    "deleted": "Élément supprimé avec succès",
    "bulk_deleted": "Éléments sélectionnés supprimés avec succès",
    "bulk_failed": "{count} éléments n'ont pas pu être supprimés.",
    "conflict": "Une autre opération est déjà en cours sur cet élément",
}

CREATE_KEY = "create"
BULK_KEY = "bulk"

FormInput = Union[BaseModel, dict]


@dataclass
class Notification:
    title: str
    description: str
    variant: str = DEFAULT
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class PanelResult:
    ok: bool
    notification: Optional[Notification] = None
    error_kind: Optional[str] = None
    row: Optional[dict] = None
    failed_ids: list = field(default_factory=list)

    @property
    def message(self) -> str:
        return self.notification.description if self.notification else ""

    @property
    def failed_count(self) -> int:
        return len(self.failed_ids)


class OperationPending(Exception):
    """The key already has a mutation in flight."""


class InFlightRegistry:
    """Keys (row ids, "create", "bulk") with a mutation currently outstanding."""

    def __init__(self):
        self._pending: set[Hashable] = set()
        self._lock = threading.Lock()

    def is_pending(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._pending

    @property
    def busy(self) -> bool:
        with self._lock:
            return bool(self._pending)

    def try_claim(self, key: Hashable) -> bool:
        with self._lock:
            if key in self._pending:
                return False
            self._pending.add(key)
            return True

    def release(self, key: Hashable) -> None:
        with self._lock:
            self._pending.discard(key)

    @contextmanager
    def claim(self, key: Hashable):
        if not self.try_claim(key):
            raise OperationPending(key)
        try:
            yield
        finally:
            self.release(key)


class EntityPanel:
    """
    Subclasses bind the lifecycle to a collection by setting:

    - collection, order_by, ascending: what to load and in which order
    - form_schema / edit_schema: pydantic forms holding the empty-form defaults
    - required_fields / required_on_update: checked for presence only
    - optional_fields: stored as None when left blank
    - falsy_optional_fields: stored as None when falsy (0, False, "")
    - immutable_fields: never written by an update
    - free_text_fields: multi-line text, stripped of markup before storing
    - messages: toast texts, see DEFAULT_MESSAGES
    - entity: singular noun used in log lines
    """

    name = "panel"
    collection: str = ""
    order_by: Optional[str] = None
    ascending = True
    form_schema: type[BaseModel] = BaseModel
    edit_schema: Optional[type[BaseModel]] = None
    required_fields: tuple[str, ...] = ()
    required_on_update: Optional[tuple[str, ...]] = None
    optional_fields: tuple[str, ...] = ()
    falsy_optional_fields: tuple[str, ...] = ()
    immutable_fields: tuple[str, ...] = ()
    secret_fields: tuple[str, ...] = ()
    free_text_fields: tuple[str, ...] = ()
    entity = "item"
    messages: dict[str, str] = DEFAULT_MESSAGES
    entity_plural = "items"

    def __init__(self, notification_log_size: Optional[int] = None):
        self.rows: list[dict] = []
        self.loading = False
        self.loaded_at: Optional[datetime] = None
        self.form: dict = self.empty_form()
        self.form_open = False
        self.editing_id: Optional[UUID] = None
        self.notifications: deque[Notification] = deque(
            maxlen=notification_log_size or settings.NOTIFICATION_LOG_SIZE
        )
        self.in_flight = InFlightRegistry()
        self._lock = threading.RLock()

    # Notifications

    def notify(self, title: str, description: str, variant: str = DEFAULT) -> Notification:
        notification = Notification(title=title, description=description, variant=variant)
        self.notifications.append(notification)
        return notification

    def _success(self, description: str, row: Optional[dict] = None) -> PanelResult:
        return PanelResult(ok=True, notification=self.notify(SUCCESS_TITLE, description), row=row)

    def _failure(self, kind: str, description: str) -> PanelResult:
        return PanelResult(
            ok=False,
            notification=self.notify(ERROR_TITLE, description, DESTRUCTIVE),
            error_kind=kind,
        )

    def text(self, key: str, **values) -> str:
        return self.messages.get(key, DEFAULT_MESSAGES[key]).format(**values)

    @property
    def entity_title(self) -> str:
        return self.entity[:1].upper() + self.entity[1:]

    # Form state

    @property
    def saving(self) -> bool:
        return self.in_flight.busy

    def empty_form(self) -> dict:
        return self.form_schema().model_dump()

    def _schema_for(self, editing: bool) -> type[BaseModel]:
        return (self.edit_schema or self.form_schema) if editing else self.form_schema

    def coerce_form(self, form: FormInput, editing: bool = False) -> dict:
        """Basic type coercion of raw form input (numbers from text boxes and the like)."""
        schema = self._schema_for(editing)
        if isinstance(form, BaseModel):
            form = form.model_dump()
        return schema.model_validate(form).model_dump()

    def _remember_form(self, form: dict) -> None:
        self.form = {k: ("" if k in self.secret_fields else v) for k, v in form.items()}

    def open_create(self) -> None:
        with self._lock:
            self.editing_id = None
            self.form = self.empty_form()
            self.form_open = True

    def open_edit(self, row_id: UUID) -> bool:
        """Fill the form from the snapshot row. False if the row is not in the snapshot."""
        with self._lock:
            row = self.find(row_id)
            if row is None:
                return False
            schema = self._schema_for(editing=True)
            values = {k: row[k] for k in schema.model_fields if row.get(k) is not None}
            self.form = schema.model_validate(values).model_dump()
            self.editing_id = row_id
            self.form_open = True
            return True

    def close_form(self) -> None:
        with self._lock:
            self.form_open = False
            self.editing_id = None
            self.form = self.empty_form()

    # Snapshot

    def find(self, row_id: UUID) -> Optional[dict]:
        return next((row for row in self.rows if row["id"] == row_id), None)

    def fetch(self, client: ServiceClient):
        return client.data.select(self.collection, order=self.order_by, ascending=self.ascending)

    def after_load(self, client: ServiceClient) -> None:
        """Hook for panels that load companion collections."""

    def load(self, client: ServiceClient) -> PanelResult:
        """Replace the snapshot with a fresh copy, or keep the old one if the fetch fails."""
        self.loading = True
        try:
            result = self.fetch(client)
            if not result.ok:
                logger.warning(f"Loading {self.collection} failed: {result.error.message}")
                return self._failure(REMOTE, self.text("load_failed"))

            with self._lock:
                self.rows = result.data or []
                self.loaded_at = datetime.utcnow()
            self.after_load(client)
            return PanelResult(ok=True)
        finally:
            self.loading = False

    # Validation and row building

    def missing_fields(self, form: dict, editing: bool = False) -> list[str]:
        required = self.required_fields
        if editing and self.required_on_update is not None:
            required = self.required_on_update
        return [name for name in required if is_blank(form.get(name))]

    def missing_message(self, missing: list[str]) -> str:
        return self.text("required", fields=", ".join(missing))

    def to_row(self, form: dict) -> dict:
        """Form values as a storable row, optional fields normalized to None."""
        form = dict(form)
        for name in self.free_text_fields:
            if isinstance(form.get(name), str):
                form[name] = sanitize_description(form[name])
        row = normalize_optional(
            form,
            self.optional_fields + self.falsy_optional_fields,
            falsy=self.falsy_optional_fields,
        )
        for name in self.secret_fields:
            row.pop(name, None)
        return row

    def build_patch(self, form: dict) -> dict:
        patch = self.to_row(form)
        for name in self.immutable_fields:
            patch.pop(name, None)
        patch["updated_at"] = datetime.utcnow()
        return patch

    def _prepare(self, form: FormInput, editing: bool) -> tuple[Optional[dict], Optional[PanelResult]]:
        try:
            values = self.coerce_form(form, editing=editing)
        except SchemaValidationError as e:
            error = e.errors()[0]
            location = ".".join(str(part) for part in error.get("loc", ()))
            return None, self._failure(VALIDATION, self.text("invalid", field=location, error=error.get("msg")))

        with self._lock:
            self._remember_form(values)
            self.form_open = True

        missing = self.missing_fields(values, editing=editing)
        if missing:
            return None, self._failure(VALIDATION, self.missing_message(missing))
        return values, None

    # Remote calls, overridable by panels that go through the identity service

    def insert_row(self, client: ServiceClient, form: dict):
        return client.data.insert(self.collection, self.to_row(form))

    def update_row(self, client: ServiceClient, row_id: UUID, form: dict):
        return client.data.update(self.collection, row_id, self.build_patch(form))

    def delete_row(self, client: ServiceClient, row_id: UUID):
        return client.data.delete(self.collection, row_id)

    # Operations

    def _conflict(self) -> PanelResult:
        return self._failure(CONFLICT, self.text("conflict"))

    def create(self, client: ServiceClient, form: FormInput) -> PanelResult:
        try:
            with self.in_flight.claim(CREATE_KEY):
                with self._lock:
                    self.editing_id = None
                values, failure = self._prepare(form, editing=False)
                if failure:
                    return failure

                result = self.insert_row(client, values)
                if not result.ok:
                    return self._failure(REMOTE, result.error.message)

                with self._lock:
                    self.form_open = False
                    self.form = self.empty_form()
                logger.info(f"{self.entity_title} created in {self.collection}")
                outcome = self._success(self.text("created"), row=self._as_row(result.data))
        except OperationPending:
            return self._conflict()

        self.load(client)
        return outcome

    def update(self, client: ServiceClient, row_id: UUID, form: FormInput) -> PanelResult:
        try:
            with self.in_flight.claim(row_id):
                with self._lock:
                    self.editing_id = row_id
                values, failure = self._prepare(form, editing=True)
                if failure:
                    return failure

                result = self.update_row(client, row_id, values)
                if not result.ok:
                    return self._failure(REMOTE, result.error.message)

                with self._lock:
                    self.form_open = False
                    self.editing_id = None
                    self.form = self.empty_form()
                logger.info(f"{self.entity_title} {row_id} updated in {self.collection}")
                outcome = self._success(self.text("updated"), row=self._as_row(result.data))
        except OperationPending:
            return self._conflict()

        self.load(client)
        return outcome

    def delete(self, client: ServiceClient, row_id: UUID) -> PanelResult:
        try:
            with self.in_flight.claim(row_id):
                result = self.delete_row(client, row_id)
                if not result.ok:
                    return self._failure(REMOTE, result.error.message)
                logger.info(f"{self.entity_title} {row_id} deleted from {self.collection}")
                outcome = self._success(self.text("deleted"))
        except OperationPending:
            return self._conflict()

        self.load(client)
        return outcome

    def delete_many(self, client: ServiceClient, ids: Iterable[UUID]) -> PanelResult:
        """
        Delete each id independently. Failures are counted into one aggregate
        notification and the snapshot is reloaded whatever happened.
        """
        ids = list(dict.fromkeys(ids))
        if not self.in_flight.try_claim(BULK_KEY):
            return self._conflict()

        failed: list[UUID] = []
        try:
            for row_id in ids:
                if not self.in_flight.try_claim(row_id):
                    failed.append(row_id)
                    continue
                try:
                    result = self.delete_row(client, row_id)
                finally:
                    self.in_flight.release(row_id)
                if not result.ok:
                    logger.warning(f"Bulk delete of {row_id} from {self.collection} failed: {result.error.message}")
                    failed.append(row_id)
        finally:
            self.in_flight.release(BULK_KEY)

        if failed:
            outcome = PanelResult(
                ok=False,
                notification=self.notify(
                    ERROR_TITLE,
                    self.text("bulk_failed", count=len(failed)),
                    DESTRUCTIVE,
                ),
                error_kind=REMOTE,
                failed_ids=failed,
            )
        else:
            outcome = self._success(self.text("bulk_deleted"))

        logger.info(f"Bulk delete on {self.collection}: {len(ids) - len(failed)} deleted, {len(failed)} failed")
        self.load(client)
        return outcome

    # Presentation

    def _as_row(self, row: Optional[dict]) -> Optional[dict]:
        return row

    def present(self, row: dict) -> dict:
        """Row as shown in the table. Panels add display-only columns here."""
        return row

    def view(self) -> dict[str, Any]:
        with self._lock:
            return {
                "rows": [self.present(row) for row in self.rows],
                "total": len(self.rows),
                "loading": self.loading,
                "saving": self.saving,
                "form_open": self.form_open,
                "editing_id": self.editing_id,
                "form": dict(self.form),
                "notifications": [
                    {
                        "title": n.title,
                        "description": n.description,
                        "variant": n.variant,
                        "created_at": n.created_at,
                    }
                    for n in self.notifications
                ],
            }
