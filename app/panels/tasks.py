import logging
from typing import Optional
from uuid import UUID

from app.panels.base import REMOTE, EntityPanel, PanelResult
from app.schemas.panels import TaskForm
from app.services.client import ServiceClient

logger = logging.getLogger(__name__)

STATUS_OPTIONS = ("En cours", "Terminé", "Bloqué", "Démarré", "Non démarré")
DEFAULT_STATUS = "Non démarré"


class TaskPanel(EntityPanel):
    """Project activities, grouped by component on the admin page."""

    name = "tasks"
    collection = "project_activities"
    order_by = "order"
    form_schema = TaskForm
    required_fields = ("activity_name", "status")
    falsy_optional_fields = (
        "component_id",
        "responsible",
        "comment",
        "start_date",
        "end_date",
        "budget_allocated",
        "budget_spent",
    )
    free_text_fields = ("comment",)
    entity = "task"
    entity_plural = "tasks"
    messages = {
        "load_failed": "Échec du chargement des tâches",
        "components_failed": "Échec du chargement des composantes",
        "required": "Le nom et le statut sont obligatoires",
        "created": "Tâche créée avec succès",
        "updated": "Tâche mise à jour avec succès",
        "deleted": "Tâche supprimée avec succès",
        "bulk_deleted": "Tâches sélectionnées supprimées avec succès",
        "bulk_failed": "{count} tâches n'ont pas pu être supprimées.",
        "conflict": "Une autre opération est déjà en cours sur cette tâche",
    }

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.components: list[dict] = []

    def load_components(self, client: ServiceClient) -> PanelResult:
        result = client.data.select("project_components", order="order")
        if not result.ok:
            logger.warning(f"Loading project components failed: {result.error.message}")
            return self._failure(REMOTE, self.messages["components_failed"])
        with self._lock:
            self.components = result.data or []
        return PanelResult(ok=True)

    def after_load(self, client: ServiceClient) -> None:
        self.load_components(client)

    def component_name(self, component_id: Optional[UUID]) -> str:
        if component_id is None:
            return "N/A"
        component = next((c for c in self.components if c["id"] == component_id), None)
        return component["name"] if component else "N/A"

    def present(self, row: dict) -> dict:
        return {**row, "component_name": self.component_name(row.get("component_id"))}

    def view(self) -> dict:
        state = super().view()
        with self._lock:
            state["components"] = list(self.components)
        return state
