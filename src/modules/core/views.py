import time
from typing import Any, Callable, Dict

import structlog
from django.core.cache import cache
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone

logger = structlog.get_logger()


def _check_database() -> None:
    conn = connections["default"]
    conn.ensure_connection()
    with conn.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()


def _check_cache() -> None:
    cache.set("_health_check", "ok", 10)
    if cache.get("_health_check") != "ok":
        raise ConnectionError("Cache read failed")


_PROBES: Dict[str, Callable[[], None]] = {
    "database": _check_database,
    "cache": _check_cache,
}


def health_check(request: HttpRequest) -> JsonResponse:
    """Public liveness probe: ``200`` when every backing service answers."""
    services: Dict[str, Dict[str, Any]] = {}
    for name, probe in _PROBES.items():
        start = time.monotonic()
        try:
            probe()
        except Exception:
            services[name] = {"status": "down"}
            logger.exception("health_check.service_down", service=name)
            continue
        services[name] = {
            "status": "up",
            "response_time_ms": round((time.monotonic() - start) * 1000, 2),
        }

    healthy = all(s["status"] == "up" for s in services.values())
    overall = "healthy" if healthy else "unhealthy"
    logger.info("health_check.completed", status=overall)
    return JsonResponse(
        {
            "status": overall,
            "timestamp": timezone.now().isoformat(),
            "services": services,
        },
        status=200 if healthy else 503,
    )
