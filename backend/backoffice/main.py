import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backoffice.core.config import Settings, settings as default_settings
from backoffice.api.routes.clients import router as clients_router
from backoffice.api.routes.commission import router as commission_router
from backoffice.api.routes.ledger_entries import router as ledger_router
from backoffice.api.routes.prospects import router as prospects_router
from backoffice.api.routes.reconciliation import router as reconciliation_router
from backoffice.services.store import MemoryStore


def create_app(cfg: Settings | None = None) -> FastAPI:
    cfg = cfg or default_settings
    logging.basicConfig(
        level=(cfg.log_level or "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Advisor Back-Office")
    app.state.settings = cfg
    app.state.memory_store = MemoryStore()

    origins = [o.strip() for o in (cfg.cors_origins or "").split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    @app.get("/api/health")
    def health():
        return {"status": "ok", "storage": cfg.storage_driver}

    app.include_router(ledger_router)
    app.include_router(clients_router)
    app.include_router(prospects_router)
    app.include_router(reconciliation_router)
    app.include_router(commission_router)
    return app


app = create_app()
