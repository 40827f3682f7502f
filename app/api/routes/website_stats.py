from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_client, get_current_auth
from app.core.exceptions import RemoteOperationError
from app.panels.stats import format_stat_value, get_stat_by_name, get_stats_by_type
from app.schemas.panels import WebsiteStatListResponse, WebsiteStatValueResponse
from app.services.auth_context import AuthContext
from app.services.client import ServiceClient

router = APIRouter(prefix="/website-stats", tags=["Website statistics"])


def _load_stats(client: ServiceClient) -> list[dict]:
    result = client.data.select("website_stats", order="metric_name")
    if not result.ok:
        raise RemoteOperationError(result.error.message)
    return result.data


@router.get("", response_model=WebsiteStatListResponse)
def list_website_stats(
    metric_type: Optional[str] = Query(default=None, alias="type"),
    auth: AuthContext = Depends(get_current_auth),
    client: ServiceClient = Depends(get_client),
):
    """All website statistics by name, optionally only those of one type."""
    stats = _load_stats(client)
    if metric_type:
        stats = get_stats_by_type(stats, metric_type)

    rows = [
        {**s, "display_value": format_stat_value(s["metric_value"], s["metric_type"])}
        for s in stats
    ]
    return WebsiteStatListResponse(stats=rows, total=len(rows))


@router.get("/{metric_name}", response_model=WebsiteStatValueResponse)
def get_website_stat(
    metric_name: str,
    auth: AuthContext = Depends(get_current_auth),
    client: ServiceClient = Depends(get_client),
):
    """Value of one metric. Unknown metrics read as 0."""
    stats = _load_stats(client)
    return WebsiteStatValueResponse(
        metric_name=metric_name,
        metric_value=get_stat_by_name(stats, metric_name),
    )
