from typing import Optional

from app.panels.base import EntityPanel
from app.schemas.panels import KPIForm

THIN_SPACE = "\u202f"


def format_number(value: Optional[float], decimals: Optional[int] = None) -> str:
    """
    French-style number: narrow space between thousands, comma before decimals.
    Without `decimals`, up to three fraction digits are kept and trailing zeros dropped.
    """
    if value is None:
        value = 0
    if decimals is None:
        text = f"{value:,.3f}".rstrip("0").rstrip(".")
    else:
        text = f"{value:,.{decimals}f}"
    if text in ("-0", ""):
        text = "0"
    return text.replace(",", THIN_SPACE).replace(".", ",")


def format_kpi_value(value: Optional[float], unit: Optional[str] = None) -> str:
    text = format_number(value)
    return f"{text} {unit}" if unit else text


class KPIPanel(EntityPanel):
    name = "kpis"
    collection = "dashboard_kpis"
    order_by = "order"
    form_schema = KPIForm
    required_fields = ("key", "label")
    required_on_update = ("label",)
    optional_fields = ("unit", "change", "icon", "color")
    # The key identifies the KPI on the dashboard and is fixed once created
    immutable_fields = ("key",)
    entity = "KPI"
    entity_plural = "KPIs"
    messages = {
        "load_failed": "Échec du chargement des KPIs",
        "required": "La clé et le label sont obligatoires",
        "created": "KPI créé avec succès",
        "updated": "KPI mis à jour avec succès",
        "deleted": "KPI supprimé avec succès",
        "bulk_deleted": "KPIs sélectionnés supprimés avec succès",
        "bulk_failed": "{count} KPIs n'ont pas pu être supprimés.",
        "conflict": "Une autre opération est déjà en cours sur ce KPI",
    }

    def present(self, row: dict) -> dict:
        return {**row, "display_value": format_kpi_value(row.get("value"), row.get("unit"))}
