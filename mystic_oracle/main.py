import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .oracle import create_session
from .routes.chat_routes import router as chat_router
from .routes.config_routes import router as config_router
from .routes.deck_routes import router as deck_router
from .routes.error_routes import router as error_router
from .settings import Settings

log = logging.getLogger("oracle.main")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    app = FastAPI(title="Mystic Oracle", version="0.1.0")
    app.state.session = create_session(settings)

    app.include_router(chat_router)
    app.include_router(deck_router)
    app.include_router(config_router)
    app.include_router(error_router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health():
        return {"ok": True, "mode": app.state.session.mode}

    return app


app = create_app()
