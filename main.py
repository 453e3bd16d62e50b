import inspect
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from openai import AsyncOpenAI

from dal.image_dal import ImageDAL
from dal.search_index_dal import SearchIndexDAL
from routes.album_route import router as album_router
from routes.image_route import router as image_router
from routes.search_route import router as search_router
from services.gallery_service import GalleryService
from services.image_store import UPLOADS_URL_PREFIX, ImageStore
from services.mock_oracle import MockCriteriaExtractor, MockImageAnalyzer
from services.openai.criteria_extractor import CriteriaExtractor
from services.openai.image_analyzer import ImageAnalyzer
from services.search_service import SearchService
from services.thumbnail_generator import ThumbnailGenerator
from utils.config import AppConfig
from utils.database_init import AsyncDatabaseInitializer
from utils.logging_config import configure_logging
from utils.storage_cleaner import StorageCleaner

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file if present

LOGGER = logging.getLogger(__name__)


def _build_oracles(app: FastAPI, config: AppConfig):
    """Return the vision and criteria oracles, creating the OpenAI client if needed."""
    if config.mock_vision:
        LOGGER.info("MOCK_VISION enabled, using mock oracles")
        app.state.openai_client = None
        return MockImageAnalyzer(), MockCriteriaExtractor()

    openai_api_key = os.getenv("OPENAI_API_KEY")
    if not openai_api_key:
        raise RuntimeError("OPENAI_API_KEY environment variable is not set")

    try:
        openai_client = AsyncOpenAI()
    except Exception as exc:
        raise RuntimeError("Failed to initialize OpenAI Async client") from exc

    app.state.openai_client = openai_client
    return (
        ImageAnalyzer(openai_client, model=config.openai_model),
        CriteriaExtractor(openai_client, model=config.openai_model),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the SQLite database (created if missing, at DATABASE_DIR/gallery.db)
      - the upload store, thumbnail renderer and storage cleaner
      - the vision and criteria oracles (OpenAI or mock)
    and attach them to `app.state`.
    """
    config: AppConfig = app.state.config

    db_initializer = AsyncDatabaseInitializer(config.database_dir)
    await db_initializer.ensure_database()
    app.state.db_initializer = db_initializer

    vision, criteria = _build_oracles(app, config)

    image_dal = ImageDAL(db_initializer)
    index_dal = SearchIndexDAL(db_initializer)
    store = ImageStore(
        config.upload_dir,
        ThumbnailGenerator(
            max_size=(config.thumbnail_size, config.thumbnail_size),
            quality=config.thumbnail_quality,
        ),
    )
    app.state.gallery_service = GalleryService(
        image_dal,
        index_dal,
        store,
        vision,
        fallback_on_oracle_error=config.vision_fallback,
        max_upload_bytes=config.max_upload_bytes,
    )
    app.state.search_service = SearchService(image_dal, index_dal, criteria)
    app.state.storage_cleaner = StorageCleaner(db_initializer, config.upload_dir)
    LOGGER.info("Gallery ready (database %s, uploads %s)", db_initializer.db_path, config.upload_dir)

    try:
        yield
    finally:
        # Gracefully close the OpenAI client if it exposes a close/aclose method.
        client = getattr(app.state, "openai_client", None)
        if client is not None:
            aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
            if aclose is not None:
                try:
                    if inspect.iscoroutinefunction(aclose):
                        await aclose()
                    else:
                        result = aclose()
                        if inspect.isawaitable(result):
                            await result
                except Exception as exc:
                    LOGGER.warning("Error closing OpenAI client: %s", exc)


def create_app(config: AppConfig | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    config = config or AppConfig.from_env()
    configure_logging(config.log_level)

    app = FastAPI(lifespan=lifespan)
    app.state.config = config

    # Serve originals and thumbnails from the upload directory.
    config.upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(UPLOADS_URL_PREFIX, StaticFiles(directory=config.upload_dir), name="uploads")

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check that verifies DB initializer and oracle wiring.
        """
        has_db = hasattr(request.app.state, "db_initializer")
        has_openai = getattr(request.app.state, "openai_client", None) is not None
        return {
            "ok": True,
            "db_initialized": has_db,
            "openai_available": has_openai,
            "mock_vision": config.mock_vision,
        }

    # Register application routers
    app.include_router(image_router)
    app.include_router(search_router)
    app.include_router(album_router)

    return app


app = create_app()
