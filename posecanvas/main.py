import logging

from fastapi import FastAPI

from posecanvas.api.routes.artifacts import router as artifacts_router
from posecanvas.api.routes.health import router as health_router
from posecanvas.config import settings


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(title=settings.app_name)

    app.include_router(health_router, prefix="/api/v1")
    app.include_router(artifacts_router, prefix="/api/v1")
    return app


app = create_app()
