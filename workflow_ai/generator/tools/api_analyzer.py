"""api_documentation_analyzer: suggested HTTP node setup for known services."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)

OPERATION_TYPES = ("GET", "POST", "PUT", "DELETE", "PATCH")


@dataclass(frozen=True)
class ServicePattern:
    auth_methods: tuple[str, ...]
    base_url: str
    headers: dict[str, str]
    rate_limits: str


SERVICE_PATTERNS: dict[str, ServicePattern] = {
    "google": ServicePattern(
        auth_methods=("OAuth2", "API Key"),
        base_url="https://www.googleapis.com",
        headers={"Content-Type": "application/json"},
        rate_limits="Varies by service (typically 100-1000 requests/minute)",
    ),
    "slack": ServicePattern(
        auth_methods=("OAuth2", "Bot Token"),
        base_url="https://slack.com/api",
        headers={"Content-Type": "application/json", "Authorization": "Bearer {token}"},
        rate_limits="Tier-based (1+ to 100+ requests/minute)",
    ),
    "github": ServicePattern(
        auth_methods=("Personal Access Token", "OAuth2"),
        base_url="https://api.github.com",
        headers={"Accept": "application/vnd.github+json", "Authorization": "Bearer {token}"},
        rate_limits="5000 requests/hour for authenticated requests",
    ),
    "airtable": ServicePattern(
        auth_methods=("Personal Access Token",),
        base_url="https://api.airtable.com/v0",
        headers={"Authorization": "Bearer {token}"},
        rate_limits="5 requests/second per base",
    ),
}


def find_pattern(service_name: str) -> Optional[ServicePattern]:
    lowered = service_name.lower()
    for key, pattern in SERVICE_PATTERNS.items():
        if key in lowered:
            return pattern
    return None


def _http_config(operation_type: str, url: str) -> dict[str, Any]:
    config: dict[str, Any] = {"method": operation_type, "url": url}
    if operation_type in ("POST", "PUT", "PATCH"):
        config["sendBody"] = True
        config["bodyParameters"] = {"parameters": [{"name": "data", "value": "={{$json.data}}"}]}
    return config


def analyze_api(
    service_name: str,
    operation_type: str = "GET",
    api_url: Optional[str] = None,
    documentation_url: Optional[str] = None,
) -> dict[str, Any]:
    """Suggest an n8n HTTP Request configuration for a service.

    Raises:
        ValueError: If service_name is empty or operation_type is unknown
    """
    if not service_name:
        raise ValueError("service_name is required")
    operation_type = operation_type.upper()
    if operation_type not in OPERATION_TYPES:
        raise ValueError(f"Unknown operation_type '{operation_type}'")

    logger.info(f"Analyzing API for {service_name} ({operation_type})")
    pattern = find_pattern(service_name)
    base_url = pattern.base_url if pattern else "https://api.service.com"
    url = api_url or f"{base_url}/endpoint"
    if operation_type in ("PUT", "PATCH", "DELETE") and not api_url:
        url = f"{url}/{{{{$json.id}}}}"

    analysis: dict[str, Any] = {
        "success": True,
        "service_name": service_name,
        "operation_type": operation_type,
        "known_service": pattern is not None,
        "authentication_methods": list(pattern.auth_methods) if pattern else [],
        "common_parameters": [],
        "suggested_nodes": [
            {
                "primary_node": "n8n-nodes-base.httpRequest",
                "config": _http_config(operation_type, url),
                "description": f"Use the HTTP Request node for {operation_type} calls to {service_name}",
            }
        ],
    }
    if pattern:
        analysis["common_parameters"] = [
            {"name": "base_url", "value": pattern.base_url, "description": "Base API URL for the service"},
            {"name": "headers", "value": dict(pattern.headers), "description": "Common headers required for API calls"},
            {"name": "rate_limits", "value": pattern.rate_limits, "description": "API rate limiting information"},
        ]
    if documentation_url:
        analysis["documentation_url"] = documentation_url
    return analysis
