from typing import Optional

from app.panels.base import EntityPanel
from app.panels.kpis import format_number
from app.schemas.panels import WebsiteStatForm

# Currency symbol separator, as browsers format fr-FR currency
NO_BREAK_SPACE = "\u00a0"


def format_stat_value(value: Optional[float], metric_type: Optional[str]) -> str:
    """Financial metrics are shown as US dollars, everything else as a plain number."""
    if metric_type == "financial":
        return f"{format_number(value, decimals=2)}{NO_BREAK_SPACE}$US"
    return format_number(value)


def get_stat_by_name(stats: list[dict], name: str) -> float:
    """Value of the named metric, 0 when it does not exist."""
    stat = next((s for s in stats if s["metric_name"] == name), None)
    return stat["metric_value"] if stat else 0


def get_stats_by_type(stats: list[dict], metric_type: str) -> list[dict]:
    return [s for s in stats if s["metric_type"] == metric_type]


class StatsPanel(EntityPanel):
    name = "stats"
    collection = "website_stats"
    order_by = "metric_name"
    form_schema = WebsiteStatForm
    required_fields = ("metric_name", "metric_type")
    optional_fields = ("description",)
    free_text_fields = ("description",)
    entity = "statistic"
    entity_plural = "statistics"
    messages = {
        "load_failed": "Échec du chargement des statistiques",
        "required": "Le nom et le type de la métrique sont obligatoires",
        "created": "Statistique ajoutée avec succès",
        "updated": "Statistique mise à jour avec succès",
        "deleted": "Statistique supprimée avec succès",
        "bulk_deleted": "Statistiques sélectionnées supprimées avec succès",
        "bulk_failed": "{count} statistiques n'ont pas pu être supprimées.",
        "conflict": "Une autre opération est déjà en cours sur cette statistique",
    }

    def get_stat_by_name(self, name: str) -> float:
        with self._lock:
            return get_stat_by_name(self.rows, name)

    def get_stats_by_type(self, metric_type: str) -> list[dict]:
        with self._lock:
            return get_stats_by_type(self.rows, metric_type)

    def present(self, row: dict) -> dict:
        return {**row, "display_value": format_stat_value(row.get("metric_value"), row.get("metric_type"))}
