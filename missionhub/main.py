import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from missionhub.api.v1.endpoints import badges, events, health, missions
from missionhub.schemas.response import ApiResponse
from missionhub.core.exceptions import AppException
from missionhub.core.handler import (
    http_exception_handler,
    validation_exception_handler,
    app_exception_handler,
    general_exception_handler
)
from missionhub.core.config import settings
from missionhub.core.database import db_manager
from missionhub.events.bus import EventBus
from missionhub.repositories.unit_of_work import sqlalchemy_uow_factory
from missionhub.services.badge_engine import BadgeEngine
from missionhub.services.badge_service import BadgeService
from missionhub.services.health import HealthCheckService
from missionhub.services.mission_service import MissionService
from missionhub.services.mission_state_machine import MissionStateMachine
from missionhub.services.realtime_notifier import InMemoryConnectionRegistry, RealtimeNotifier
from missionhub.services.transaction_aggregator import TransactionAggregator

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def build_services(app: FastAPI, bus: EventBus, uow_factory) -> None:
    """Wire the event bus subscribers and attach the services to ``app.state``."""
    notifier = RealtimeNotifier(
        InMemoryConnectionRegistry(),
        heartbeat_seconds=settings.REALTIME_HEARTBEAT_SECONDS,
        max_pending=settings.REALTIME_MAX_PENDING_MESSAGES,
    )
    notifier.register(bus)

    badge_engine = BadgeEngine(uow_factory, bus)
    badge_engine.register()

    state_machine = MissionStateMachine()
    app.state.bus = bus
    app.state.notifier = notifier
    app.state.badge_engine = badge_engine
    app.state.mission_service = MissionService(
        uow_factory,
        bus,
        state_machine=state_machine,
        aggregator=TransactionAggregator(state_machine),
        notifier=notifier,
    )
    app.state.badge_service = BadgeService(uow_factory)
    app.state.health_service = HealthCheckService(notifier=notifier)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    logger.info("Starting up application...")

    try:
        db_manager.init(
            database_url=settings.database_url_computed,
            echo=settings.DB_ECHO,
            pool_size=settings.DB_POOL_SIZE
        )
        if settings.DB_CREATE_TABLES:
            await db_manager.create_all()
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    bus = EventBus()
    build_services(app, bus, sqlalchemy_uow_factory(db_manager.session))
    logger.info("Event bus and subscribers ready")

    yield

    logger.info("Shutting down application...")
    await bus.drain()
    await bus.close()
    await db_manager.close()


app = FastAPI(
    title="MissionHub API",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register global exception handlers (apply to all endpoints)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)


app.include_router(missions.router, prefix="/api/v1/missions", tags=["Missions"])
app.include_router(badges.router, prefix="/api/v1/badges", tags=["Badges"])
app.include_router(events.router, prefix="/api/v1/events", tags=["Events"])
app.include_router(health.router, prefix="/api/v1", tags=["Health"])


@app.get("/")
def root():
    """Root health check endpoint."""
    return ApiResponse(
        success=True,
        message="System operational",
        data={"status": "ok"}
    )
