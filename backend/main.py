from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from datetime import datetime
from contextlib import asynccontextmanager
from dotenv import load_dotenv
import uvicorn
import logging
import time

from core.config import get_settings
from core.exceptions import AppException, app_exception_handler, generic_exception_handler
from core.logging import setup_logging
from services.similarity import get_similarity_provider, shutdown_similarity_executor
from api.ranking_routes import router as ranking_router

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup/shutdown"""
    settings = get_settings()
    setup_logging(settings.log_level, json_format=settings.log_json, log_file=settings.log_file)

    # Startup
    logger.info(f"🚀 {settings.app_name} v{settings.app_version} starting...")
    logger.info(f"Environment: {settings.environment}")

    provider = get_similarity_provider(settings.semantic_backend)
    try:
        await provider.warmup()
        logger.info(f"🧠 Semantic backend: {provider.name}")
    except Exception as e:
        # Scoring still works; semantic lookups degrade per candidate
        logger.warning(f"⚠️ Semantic backend warmup failed ({provider.name}): {e}")

    logger.info(f"⚡ Ranking concurrency: {settings.ranking_concurrency}")
    logger.info("✅ Server ready")

    yield

    # Shutdown
    logger.info("🛑 Shutting down gracefully...")
    shutdown_similarity_executor()


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Candidate/job match scoring and ranking",
        version=settings.app_version,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
        lifespan=lifespan
    )

    app.include_router(ranking_router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=3600,  # Cache preflight requests for 1 hour
    )

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    @app.middleware("http")
    async def add_performance_headers(request, call_next):
        """Add performance monitoring headers"""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(round(process_time * 1000, 2))
        return response

    @app.get("/health")
    async def health_check():
        """Health check endpoint for monitoring"""
        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "version": settings.app_version,
            "semantic_backend": settings.semantic_backend,
        }

    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run("main:app", host=settings.host, port=settings.port, reload=settings.debug)
