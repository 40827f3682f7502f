import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional
from uuid import UUID

from app.panels.base import EntityPanel, PanelResult
from app.schemas.panels import UserCreateForm, UserEditForm
from app.services.client import ServiceClient
from app.services.identity_service import AuthError, AuthResult

logger = logging.getLogger(__name__)

RECENT_ACCOUNT_DAYS = 7
SELF_DELETE_MESSAGE = "Vous ne pouvez pas supprimer votre propre compte"


def role_label(role: Optional[str]) -> str:
    return "Administrateur" if role == "admin" else "Lecteur"


def account_status(created_at: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Accounts created during the last week are shown as active."""
    if created_at is None:
        return "Inactif"
    now = now or datetime.utcnow()
    return "Actif" if created_at > now - timedelta(days=RECENT_ACCOUNT_DAYS) else "Inactif"


class UserPanel(EntityPanel):
    """
    User management. Accounts are created and deleted through the identity
    service so the credentials and the profile row stay together; edits only
    touch the profile.
    """

    name = "users"
    collection = "user_profiles"
    order_by = "created_at"
    ascending = False
    form_schema = UserCreateForm
    edit_schema = UserEditForm
    required_fields = ("email", "password")
    required_on_update = ()
    optional_fields = ("full_name",)
    secret_fields = ("password",)
    entity = "user"
    entity_plural = "users"
    messages = {
        "load_failed": "Échec du chargement des utilisateurs",
        "required": "L'email et le mot de passe sont obligatoires",
        "created": "Utilisateur ajouté avec succès",
        "updated": "Utilisateur mis à jour avec succès",
        "deleted": "Utilisateur supprimé avec succès",
        "bulk_deleted": "Utilisateurs sélectionnés supprimés avec succès",
        "bulk_failed": "{count} utilisateurs n'ont pas pu être supprimés.",
        "conflict": "Une autre opération est déjà en cours sur cet utilisateur",
    }

    def __init__(
        self,
        current_user_id: Optional[UUID] = None,
        on_account_deleted: Optional[Callable[[UUID], None]] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.current_user_id = current_user_id
        self.on_account_deleted = on_account_deleted
        self.selected_ids: set[UUID] = set()

    def insert_row(self, client: ServiceClient, form: dict):
        return client.auth.create_account(
            form["email"],
            form["password"],
            metadata={"full_name": form.get("full_name"), "role": form.get("role") or "user"},
        )

    def delete_row(self, client: ServiceClient, row_id: UUID):
        if self.current_user_id is not None and row_id == self.current_user_id:
            logger.warning(f"User {row_id} attempted to delete their own account")
            return AuthResult(error=AuthError(SELF_DELETE_MESSAGE, status=403))
        result = client.auth.delete_account(row_id)
        if result.ok and self.on_account_deleted is not None:
            self.on_account_deleted(row_id)
        return result

    def _as_row(self, row):
        # create_account answers with account info, not a profile row
        if row is None or isinstance(row, dict):
            return row
        return {"id": row.id, "email": row.email, **row.metadata}

    # Selection

    def toggle_selection(self, row_id: UUID) -> bool:
        """Flip one row in or out of the selection. Returns whether it is now selected."""
        with self._lock:
            if row_id in self.selected_ids:
                self.selected_ids.discard(row_id)
                return False
            self.selected_ids.add(row_id)
            return True

    def select_all(self) -> None:
        with self._lock:
            all_ids = {row["id"] for row in self.rows}
            if all_ids and self.selected_ids >= all_ids:
                self.selected_ids = set()
            else:
                self.selected_ids = all_ids

    def delete_many(self, client: ServiceClient, ids: Optional[Iterable[UUID]] = None) -> PanelResult:
        """Delete the given ids, or the current selection, and clear the selection."""
        with self._lock:
            targets = list(ids) if ids is not None else sorted(self.selected_ids, key=str)
        result = super().delete_many(client, targets)
        with self._lock:
            self.selected_ids = set()
        return result

    def load(self, client: ServiceClient) -> PanelResult:
        result = super().load(client)
        with self._lock:
            # Selection only refers to rows that still exist
            self.selected_ids &= {row["id"] for row in self.rows}
        return result

    def present(self, row: dict) -> dict:
        return {
            **row,
            "role_label": role_label(row.get("role")),
            "status": account_status(row.get("created_at")),
        }

    def view(self) -> dict:
        state = super().view()
        with self._lock:
            state["selected_ids"] = sorted(self.selected_ids, key=str)
        return state
