"""
Production FastAPI Application

Payment pipeline API with a background task group for ticket notifications.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.orm_db_setting import dispose_engine, get_engine
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Payment Service] Starting up...')

    # Setup OpenTelemetry tracing
    tracing = TracingConfig(service_name=settings.SERVICE_NAME)
    tracing.setup()
    Logger.base.info('📊 [Payment Service] OpenTelemetry tracing configured')

    # Wire dependency injection for all modules
    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Payment Service] Dependency injection wired')

    # Initialize database
    engine = get_engine()
    tracing.instrument_sqlalchemy(engine=engine)
    Logger.base.info('🗄️  [Payment Service] Database engine ready + instrumented')

    # Gateway and notification calls go through httpx
    tracing.instrument_httpx()
    Logger.base.info(f'💳 [Payment Service] Payment gateway: {settings.PAYMENT_GATEWAY}')

    # Task group for fire-and-forget work (ticket notifications)
    async with anyio.create_task_group() as tg:
        container.task_group.override(tg)
        Logger.base.info('✅ [Payment Service] Ready to serve requests')

        yield

        Logger.base.info('🛑 [Payment Service] Shutting down...')
        container.task_group.reset_override()

    await dispose_engine()
    Logger.base.info('🗄️  [Payment Service] Database engine disposed')

    # Shutdown tracing (flush remaining spans)
    tracing.shutdown()
    Logger.base.info('📊 [Payment Service] Tracing shutdown complete')

    # Unwire DI
    container.unwire()

    Logger.base.info('👋 [Payment Service] Shutdown complete')


# Create FastAPI app using shared factory
app = create_app(lifespan=lifespan)

Logger.base.info('📊 [Payment Service] FastAPI auto-instrumentation enabled')


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
