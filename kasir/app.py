import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.templating import Jinja2Templates

from kasir.core.config import Settings, get_settings
from kasir.core.logging import configure_logging, get_logger
from kasir.repositories.json_storage import LocalStore
from kasir.repositories.sql_repository import SQLRepository
from kasir.routers import backup as backup_router
from kasir.routers import dashboard as dashboard_router
from kasir.routers import products as products_router
from kasir.routers import receipts as receipts_router
from kasir.routers import transactions as transactions_router
from kasir.services.backup_service import BackupService
from kasir.services.checkout_service import CheckoutService
from kasir.services.persistence import PersistenceFacade

BASE = os.path.dirname(__file__)
TEMPLATES = os.path.join(BASE, "..", "templates")

logger = get_logger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Factory compatible with uvicorn/gunicorn (``uvicorn kasir.app:app``)."""
    settings = settings or get_settings()
    configure_logging()

    app = FastAPI(title="Kasir Toko Roti")
    if settings.app_env != "prod":
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )

    facade = PersistenceFacade(settings, LocalStore(settings.local_data_dir), SQLRepository(settings))
    app.state.settings = settings
    app.state.facade = facade
    app.state.checkout_service = CheckoutService(facade)
    app.state.backup_service = BackupService(facade.local)
    app.state.templates = Jinja2Templates(directory=TEMPLATES)

    app.include_router(products_router.router)
    app.include_router(transactions_router.router)
    app.include_router(dashboard_router.router)
    app.include_router(backup_router.router)
    app.include_router(receipts_router.router)

    @app.get("/health")
    def health():
        return {"ok": True, "backend": facade.active_backend}

    logger.info("app_created", backend=facade.active_backend, env=settings.app_env)
    return app


app = create_app()
