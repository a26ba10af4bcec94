import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .common import lifespan, pixsoul_error_handler
from .config import Settings, settings as default_settings
from .core.exceptions import PixSoulError
from .core.storage import UploadStorage
from .routers.auth.endpoints import router as AuthEndpoints
from .routers.memories.endpoints import router as MemoriesEndpoints
from .routers.users.endpoints import router as UsersEndpoints

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(title="PixSoul", lifespan=lifespan)
    app.state.settings = settings
    app.state.storage = UploadStorage(settings.upload_dir, settings.max_upload_bytes)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PixSoulError, pixsoul_error_handler)

    # Include routers
    app.include_router(AuthEndpoints)
    app.include_router(UsersEndpoints)
    app.include_router(MemoriesEndpoints)

    # Uploaded images are served by file name
    app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    logger.info(f"PixSoul app created ({settings.environment})")
    return app


app = create_app()
