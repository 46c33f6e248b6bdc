import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from synergy_backend.api.auth import auth_router
from synergy_backend.api.join_requests import join_requests_router
from synergy_backend.api.messages import messages_router
from synergy_backend.api.projects import projects_router
from synergy_backend.api.system import system_router
from synergy_backend.api.users import users_router
from synergy_backend.database import SessionFactory, create_db_engine, create_session_factory
from synergy_backend.exceptions import register_exception_handlers
from synergy_backend.model import metadata
from synergy_backend.settings import settings
from synergy_backend.utils.tokens import TokenService
from synergy_backend.websocket.router import ws_router
from synergy_backend.websocket.service import ChatService

logger = logging.getLogger(__name__)


def init_schema(engine: Optional[Engine] = None) -> None:
    """Create missing tables."""
    owned = engine is None
    engine = create_db_engine() if owned else engine
    metadata.create_all(bind=engine)
    if owned:
        engine.dispose()
    logger.info("Database schema ready")


def create_app(
    session_factory: Optional[SessionFactory] = None,
    token_service: Optional[TokenService] = None,
) -> FastAPI:
    """
    Build the application.

    Every collaborator is constructed here and stored on ``app.state``:
    ``session_factory``, ``token_service`` and ``chat`` (the realtime
    channel's services). Tests pass their own session factory and token
    service.
    """
    if session_factory is None:
        engine = create_db_engine()
        session_factory = create_session_factory(engine)
    else:
        engine = None
    token_service = token_service or TokenService.from_settings()
    chat = ChatService.create(session_factory, token_service)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.DEBUG_MODE == "production" and engine is not None:
            init_schema(engine)

        yield

        await chat.manager.stop()

    app = FastAPI(title="Synergy API", lifespan=lifespan)
    app.state.session_factory = session_factory
    app.state.token_service = token_service
    app.state.chat = chat

    # Register custom exception handlers for structured error responses
    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials="*" not in settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(users_router, prefix="/api/users", tags=["users"])
    app.include_router(projects_router, prefix="/api/projects", tags=["projects"])
    app.include_router(join_requests_router, prefix="/api/joinRequests", tags=["join requests"])
    app.include_router(messages_router, prefix="/api/messages", tags=["messages"])
    app.include_router(system_router, prefix="/api", tags=["system"])

    # Realtime chat
    app.include_router(ws_router)

    return app
