from fastapi import APIRouter, Depends
from dependency_injector.wiring import inject, Provide

from eduwallet.config import Settings
from eduwallet.containers import Container
from eduwallet.providers.storage.base import KeyValueStore
from eduwallet.schemas.health import HealthCheckResponse

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
@inject
async def health_check(
    storage: KeyValueStore = Depends(Provide[Container.repositories.storage]),
    settings: Settings = Depends(Provide[Container.config.config]),
) -> HealthCheckResponse:
    """Health check endpoint."""

    reachable = storage.ping()
    return HealthCheckResponse(
        status="healthy" if reachable else "degraded",
        storage_backend=settings.STORAGE_BACKEND,
        storage_reachable=reachable,
        error=None if reachable else "storage backend unreachable",
    )
