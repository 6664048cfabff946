from datetime import datetime, timezone
from typing import Dict, Any, Optional


def create_health_response(
    service_name: str,
    checks: Optional[Dict[str, bool]] = None,
    version: str = "0.1.0",
    details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Standardized health report; unhealthy as soon as one check fails"""

    health_data = {
        "service": service_name,
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": version
    }

    if checks:
        health_data["checks"] = checks
        if not all(checks.values()):
            health_data["status"] = "unhealthy"

    if details:
        health_data["details"] = details

    return health_data
