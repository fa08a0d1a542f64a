import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pdv_api.core.config import CORS_ALLOW_CREDENTIALS, CORS_ORIGINS, DATABASE_URL
from pdv_api.core.database import Base, engine
from pdv_api.core.logging_setup import configure_logging
from pdv_api.core.startup_checks import ensure_migrations_applied, validate_database_environment
from pdv_api.middleware.observability import REQUEST_ID_HEADER, ObservabilityMiddleware
import pdv_api.models  # garante que os models são importados antes do create_all

from pdv_api.routers.auth import router as auth_router
from pdv_api.routers.commissions import router as commissions_router
from pdv_api.routers.company_settings import router as company_settings_router
from pdv_api.routers.functions import router as functions_router
from pdv_api.routers.receivables import router as receivables_router
from pdv_api.routers.spreadsheets import router as spreadsheets_router

configure_logging()

logger = logging.getLogger(__name__)
STARTUP_PREFIX = "[STARTUP]"
REPO_ROOT = Path(__file__).resolve().parents[1]
ALEMBIC_CONFIG_PATH = Path(
    os.getenv("ALEMBIC_CONFIG", str(REPO_ROOT / "alembic.ini"))
)


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield


app = FastAPI(
    title="PDV API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[REQUEST_ID_HEADER, "Content-Disposition"],
)
app.add_middleware(ObservabilityMiddleware)


def _startup_tasks() -> None:
    try:
        validate_database_environment()
        # Cria tabelas (dev). Em produção, use migrations.
        if DATABASE_URL.startswith("sqlite"):
            Base.metadata.create_all(bind=engine)
        ensure_migrations_applied(engine=engine, alembic_config_path=ALEMBIC_CONFIG_PATH)
    except Exception:
        logger.exception("%s ERROR startup failed", STARTUP_PREFIX)
        raise


# Routers
app.include_router(functions_router)
app.include_router(auth_router)
app.include_router(commissions_router)
app.include_router(company_settings_router)
app.include_router(receivables_router)
app.include_router(spreadsheets_router)


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}
