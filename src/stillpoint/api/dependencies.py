"""
API Dependencies - service container access for FastAPI endpoints

Pattern:
1. main_asyncio.py builds the ServiceContainer during startup
2. main_asyncio.py calls set_service_container()
3. Endpoints use get_service_container() via Depends()

Example:
    @router.get("")
    async def get_status(services: ServiceContainer = Depends(get_service_container)):
        return services.session_controller.status()
"""

from typing import Optional

from fastapi import HTTPException, status

from stillpoint.services.service_container import ServiceContainer

_service_container: Optional[ServiceContainer] = None


def set_service_container(services: Optional[ServiceContainer]) -> None:
    """Store (or clear, with None) the service container for API access."""
    global _service_container
    _service_container = services


async def get_service_container() -> ServiceContainer:
    """
    FastAPI dependency for accessing the service container.

    Raises:
        HTTPException: 503 if the application has not finished starting
    """
    if _service_container is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service container not initialized. Application may still be starting."
        )
    return _service_container
