import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.class_subjects.router import router as class_subjects_router
from app.api.v1.exports.router import router as exports_router
from app.api.v1.fees.router import router as fees_router
from app.api.v1.grades.router import router as grades_router
from app.api.v1.receipts.router import router as receipts_router
from app.api.v1.receipts.service import backfill_receipt_serials
from app.api.v1.students.router import router as students_router
from app.api.v1.subjects.router import router as subjects_router
from app.core.config import settings
from app.core.exceptions import ServiceError
from app.db.schema_check import ensure_tables
from app.db.session import AsyncSessionLocal, engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await ensure_tables(engine)
    if settings.backfill_serials_on_startup:
        async with AsyncSessionLocal() as session:
            try:
                await backfill_receipt_serials(session)
            except ServiceError as e:
                # Non-fatal: python -m app.scripts.backfill_receipt_serials re-runs it.
                logger.error("Receipt serial backfill on startup failed: %s", e.message)
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(title="School Fee Records", lifespan=lifespan)

    # CORS: allow frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(students_router)
    app.include_router(fees_router)
    app.include_router(receipts_router)
    app.include_router(grades_router)
    app.include_router(subjects_router)
    app.include_router(class_subjects_router)
    app.include_router(exports_router)

    return app


app = create_app()
