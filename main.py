from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.application.use_cases.notifications import seed_notification_actions
from app.config import get_settings
from app.infrastructure.database import SessionLocal, engine, initialize_database
from app.interfaces.api.routes import register_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the schema and seed the action catalog on startup."""

    await initialize_database()
    async with SessionLocal() as session:
        await seed_notification_actions(session)
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""

    settings = get_settings()
    app = FastAPI(lifespan=lifespan)

    # Allow the web client to call the API with credentials.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.site_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
