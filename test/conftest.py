"""
Root conftest

Environment defaults are set before anything under ``src`` is imported: settings are
read once at import time.
"""

import os
from pathlib import Path
import tempfile


def _early_setup_test_environment() -> None:
    os.environ.setdefault('DEPLOY_ENV', 'test')
    os.environ.setdefault('PAYMENT_GATEWAY', 'mock')
    os.environ.setdefault('RAZORPAY_WEBHOOK_SECRET', 'test_webhook_secret')
    os.environ.setdefault('SECRET_KEY', 'test_secret_key')
    os.environ.setdefault('STAFF_API_TOKEN', 'test_staff_token')
    os.environ.setdefault('PUBLIC_BASE_URL', 'http://testserver')
    os.environ.setdefault(
        'DATABASE_URL',
        f'sqlite+aiosqlite:///{Path(tempfile.gettempdir()) / "ticketing_payment_test.db"}',
    )
    os.environ.setdefault('TEST_LOG_DIR', str(Path(tempfile.gettempdir()) / 'ticketing_test_logs'))


# Call immediately to set env vars before any imports
_early_setup_test_environment()

from collections.abc import AsyncGenerator, AsyncIterator, Generator  # noqa: E402
from contextlib import asynccontextmanager  # noqa: E402

from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402

from src.platform.app_factory import create_app  # noqa: E402
from src.platform.config.di import container  # noqa: E402
from src.platform.config.wire_modules import WIRE_MODULES  # noqa: E402
from src.platform.database.orm_db_setting import (  # noqa: E402
    AsyncEngineManager,
    Base,
    Database,
    dispose_engine,
    get_engine,
)
from src.platform.logging.loguru_io import Logger  # noqa: E402
from src.service.reservation.driven_adapter.model.seat_model import SeatModel  # noqa: E402, F401
from src.service.ticketing.driven_adapter.model import (  # noqa: E402, F401
    EventEnrollmentModel,
    PaymentModel,
    ResourceModel,
    TicketModel,
    UserModel,
    VoucherClaimModel,
    VoucherModel,
)


# =============================================================================
# Database fixtures (sqlite file per test, schema from the ORM metadata)
# =============================================================================
@pytest.fixture
async def database(tmp_path: Path) -> AsyncGenerator[Database, None]:
    engine_manager = AsyncEngineManager(
        database_url=f'sqlite+aiosqlite:///{tmp_path / "pipeline.db"}'
    )
    async with engine_manager.get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield Database(engine_manager=engine_manager)

    await engine_manager.dispose()


# =============================================================================
# Test app (no tracing exporters, no task group: notifications run inline)
# =============================================================================
@asynccontextmanager
async def lifespan_for_tests(app: FastAPI) -> AsyncIterator[None]:
    Logger.base.info('🧪 [Test App] Starting up...')

    # Fresh schema on the DATABASE_URL sqlite file for every client
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    container.wire(modules=WIRE_MODULES)

    yield

    await dispose_engine()
    container.unwire()
    Logger.base.info('👋 [Test App] Shutdown complete')


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    app = create_app(lifespan=lifespan_for_tests, title_suffix=' (Test)')
    with TestClient(app) as test_client:
        yield test_client
