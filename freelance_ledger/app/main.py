# Freelance Ledger backend entrypoint: FastAPI app, routers and error mapping.

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from freelance_ledger.app.api import clients
from freelance_ledger.app.api import invoices
from freelance_ledger.app.api import login
from freelance_ledger.app.api import payments
from freelance_ledger.app.api import projects
from freelance_ledger.app.api import register
from freelance_ledger.app.api import settings as settings_api
from freelance_ledger.app.api import time_tracking
from freelance_ledger.app.core.dev_seed import ensure_demo_workspace
from freelance_ledger.app.core.errors import LedgerError
from freelance_ledger.app.core.logging import configure_logging
from freelance_ledger.app.core.settings import get_settings
from freelance_ledger.app.db.base import Base
from freelance_ledger.app.db.session import SessionLocal, engine

logger = logging.getLogger("freelance_ledger.app.main")

settings = get_settings()
app = FastAPI(title=settings.app_name, version=settings.api_version)

origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(register.router)
app.include_router(login.router)
app.include_router(clients.router)
app.include_router(projects.router)
app.include_router(time_tracking.router)
app.include_router(invoices.router)
app.include_router(payments.router)
app.include_router(settings_api.router)


@app.exception_handler(LedgerError)
async def handle_ledger_error(request: Request, exc: LedgerError):
    if exc.status_code == 409:
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/")
def read_root():
    return {"app": "Freelance Ledger backend", "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.on_event("startup")
def prepare_database():
    configure_logging(settings.log_level)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        ensure_demo_workspace(db)
    finally:
        db.close()
