"""
FastAPI application factory.

``create_app`` wires settings, logging, the session factory, module
configs, error handlers, and routers.  Tests pass their own session factory
and deterministic clock; a running server builds both from settings.
"""

from pathlib import Path
from uuid import uuid4

from fastapi import FastAPI, Request
from sqlalchemy.orm import Session, sessionmaker

from workshop_api.errors import install_error_handlers
from workshop_api.routers import reports, work_orders
from workshop_config import WorkshopSettings, get_active_settings
from workshop_kernel import __version__
from workshop_kernel.db.engine import create_tables, get_session_factory, init_engine_from_url
from workshop_kernel.domain.clock import Clock, SystemClock
from workshop_kernel.logging_config import LogContext, configure_logging, get_logger
from workshop_modules.reporting import ReportingConfig
from workshop_modules.work_orders.config import WorkOrderConfig

logger = get_logger("api.app")

REQUEST_ID_HEADER = "X-Request-Id"


async def bind_request_context(request: Request, call_next):
    """Bind correlation and actor ids to every log line of one request."""
    correlation_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
    with LogContext.bind(
        correlation_id=correlation_id,
        actor_id=request.headers.get("X-Actor-Id"),
    ):
        response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = correlation_id
    return response


def create_app(
    settings: WorkshopSettings | None = None,
    session_factory: sessionmaker[Session] | None = None,
    clock: Clock | None = None,
    config_path: Path | str | None = None,
    create_schema: bool = False,
) -> FastAPI:
    settings = settings or get_active_settings(config_path)
    configure_logging(level=settings.logging.level)

    if session_factory is None:
        engine = init_engine_from_url(
            settings.database.url,
            echo=settings.database.echo,
            pool_size=settings.database.pool_size,
            max_overflow=settings.database.max_overflow,
        )
        if create_schema:
            create_tables(engine)
        session_factory = get_session_factory()

    app = FastAPI(title="Workshop ledger", version=__version__)
    app.state.session_factory = session_factory
    app.state.clock = clock or SystemClock()
    app.state.work_order_config = WorkOrderConfig.from_dict(settings.work_orders)
    app.state.reporting_config = ReportingConfig.from_dict(settings.reporting)

    install_error_handlers(app)
    app.middleware("http")(bind_request_context)
    app.include_router(work_orders.router)
    app.include_router(reports.router)

    logger.info(
        "api_app_created",
        extra={"settings_source": settings.source or "defaults", "version": __version__},
    )
    return app
