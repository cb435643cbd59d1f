"""FastAPI application factory."""
from __future__ import annotations
import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.templating import Jinja2Templates

from chipledger.api.routes import router
from chipledger.config import settings

BASE_DIR = Path(__file__).resolve().parent


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Chip Ledger",
        description="Buy-in, cash-out and table-fee settlement for home poker games",
        version="1.0.0",
    )

    # Templates
    templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
    app.state.templates = templates

    # Routers
    app.include_router(router)

    return app


app = create_app()
