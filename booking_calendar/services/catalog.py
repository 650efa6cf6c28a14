"""Bookable service catalog with prices, durations, and descriptions."""

import logging
from typing import Optional

logger = logging.getLogger(__name__)

SERVICE_CATALOG: dict[str, dict] = {
    "haircut": {
        "name": "Cut",
        "description": "Wash, cut and blow-dry for any hair length.",
        "price": "RWF 10,000",
        "duration_minutes": 60,
    },
    "braids": {
        "name": "Box Braids",
        "description": "Medium knotless box braids, hair extensions included.",
        "price": "RWF 35,000",
        "duration_minutes": 240,
    },
    "twists": {
        "name": "Twists",
        "description": "Two-strand or Senegalese twists on natural hair.",
        "price": "RWF 25,000",
        "duration_minutes": 180,
    },
    "makeup": {
        "name": "Makeup",
        "description": "Full-face makeup for events, lashes included.",
        "price": "RWF 20,000",
        "duration_minutes": 60,
    },
    "manicure": {
        "name": "Manicure",
        "description": "Nail shaping, cuticle care and gel polish.",
        "price": "RWF 8,000",
        "duration_minutes": 45,
    },
}


def get_all_services() -> list[dict]:
    """Return all services with basic info."""
    return [
        {"id": sid, "name": info["name"], "price": info["price"]}
        for sid, info in SERVICE_CATALOG.items()
    ]


def get_service_details(service_id: str) -> Optional[dict]:
    """Get full details for a specific service, or None if unknown."""
    normalized = service_id.lower().strip()
    info = SERVICE_CATALOG.get(normalized)
    if info is None:
        logger.debug("Unknown service requested: %r", service_id)
        return None
    return {"id": normalized, **info}
