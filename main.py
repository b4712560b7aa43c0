from contextlib import asynccontextmanager

from fastapi import FastAPI

from notification_service.application.router import EventRouter
from notification_service.config import get_settings
from notification_service.infrastructure.database import SessionLocal, engine, initialize_database
from notification_service.infrastructure.email import build_email_provider
from notification_service.infrastructure.messaging import BrokerConnectionManager
from notification_service.interfaces.api.errors import register_error_handlers
from notification_service.interfaces.api.routes import register_routes
from notification_service.logging_config import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare the database, start the event consumer and release both on shutdown."""

    settings = get_settings()
    configure_logging(settings.log_level)
    initialize_database()

    app.state.consumer = None
    if settings.consumer_enabled:
        router = EventRouter(
            SessionLocal, email_provider=build_email_provider(settings), settings=settings
        )
        consumer = BrokerConnectionManager(router, settings)
        app.state.consumer = consumer
        await consumer.connect()

    yield

    if app.state.consumer is not None:
        await app.state.consumer.close()
    engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the notification service application."""

    app = FastAPI(title="Notification Service", lifespan=lifespan)
    register_error_handlers(app)
    register_routes(app)
    return app


app = create_app()
