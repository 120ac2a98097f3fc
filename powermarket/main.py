from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional
import asyncio
import logging

from powermarket.api.routes_database import router as database_router
from powermarket.api.routes_historical import router as historical_router
from powermarket.api.routes_predict import router as predict_router
from powermarket.api.routes_optimize import router as optimize_router
from powermarket.api.routes_pipeline import router as pipeline_router

from powermarket.config import Settings
from powermarket.services.pipeline import MarketPipeline

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(settings: Optional[Settings] = None, pipeline: Optional[MarketPipeline] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    pipeline = pipeline or MarketPipeline.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load market data on startup"""
        logger.info("[STARTUP] Power market service starting")
        if settings.load_on_startup:
            await asyncio.to_thread(pipeline.load)
            logger.info(f"[STARTUP] {len(pipeline.store)} records available")
        yield
        logger.info("[SHUTDOWN] Power market service stopped")

    app = FastAPI(title="Power Market Forecast & Bidding API", version="1.0.0", lifespan=lifespan)
    app.state.pipeline = pipeline
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(database_router, prefix="/api/database")
    app.include_router(historical_router, prefix="/api/historical-prices")
    app.include_router(predict_router, prefix="/api/predict")
    app.include_router(optimize_router, prefix="/api/optimize")
    app.include_router(pipeline_router, prefix="/api/pipeline")

    @app.get("/api/health")
    def health_check():
        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "dataLoaded": pipeline.store.is_loaded,
            "dataRecords": len(pipeline.store),
        }

    return app


def main():
    import uvicorn

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    logger.info(f"[STARTUP] Listening on http://{settings.host}:{settings.port}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
