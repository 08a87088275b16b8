"""
Service registry shared by the application lifespan and the routers

The lifespan fills `services`; routers resolve through the getters below so
tests can swap them with `app.dependency_overrides`.
"""

from typing import Any, Dict

from fastapi import HTTPException

from shopwoo.domains.importer.services import ImportScheduler, ProgressReporter

services: Dict[str, Any] = {}


def _require(name: str) -> Any:
    service = services.get(name)
    if service is None:
        raise HTTPException(
            status_code=503, detail=f"Service '{name}' is not initialized"
        )
    return service


async def get_import_scheduler() -> ImportScheduler:
    return _require("scheduler")


async def get_progress_reporter() -> ProgressReporter:
    return _require("progress")
