'''
Pytest configuration for the carpool schedule backend.

This file sets up fixtures for:
1. Forcing the application into TEST_MODE before any code is imported.
2. Providing a fresh in-memory SQLite database (aiosqlite) per test.
3. Seeding a small, known carpool world through the factories.
4. Providing the validators, pre-injected with a repository and a fixed clock.
'''
import os

# Settings are read at import time; these must exist before the app is imported.
os.environ.setdefault("DATABASE_URL_PROD", "sqlite+aiosqlite://")
os.environ.setdefault("DATABASE_URL_TEST", "sqlite+aiosqlite://")
os.environ["TEST_MODE"] = "True"

import pytest
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.pool import StaticPool

# --- Constant Imports ----
from tests.constants import (
    TEST_GROUP_ID, TEST_OTHER_GROUP_ID,
    TEST_SLOT_ID, TEST_SLOT_ID_SAME_TIME, TEST_SLOT_ID_OTHER_TIME,
    TEST_SLOT_ID_OTHER_GROUP, TEST_SLOT_ID_PAST,
    TEST_VEHICLE_ID, TEST_OTHER_VEHICLE_ID,
    TEST_DRIVER_ID, TEST_OTHER_DRIVER_ID, TEST_CHILD_ID,
    FIXED_NOW, NEXT_MONDAY_0730, NEXT_MONDAY_0800, LAST_MONDAY_0730,
    TEST_SCHEDULE_HOURS
)
from tests.database import factories

# --- Application Imports ---
from src.carpool_schedule_backend.main import app
from src.carpool_schedule_backend.common.config import settings
from src.carpool_schedule_backend.common.clock import FixedClock
from src.carpool_schedule_backend.database.models import Base
from src.carpool_schedule_backend.database.repository import ScheduleSlotRepository
from src.carpool_schedule_backend.services.capacity_calculator import CapacityCalculator
from src.carpool_schedule_backend.services.conflict_detector import ConflictDetector
from src.carpool_schedule_backend.services.schedule_config_validator import ScheduleConfigValidator
from src.carpool_schedule_backend.services.schedule_template_validator import ScheduleTemplateValidator
from src.carpool_schedule_backend.services.slot_integrity_validator import SlotIntegrityValidator
from src.carpool_schedule_backend.services.timing_validator import TimingValidator
from src.carpool_schedule_backend.services.validation_service import ValidationService


@pytest.fixture(scope="session")
def anyio_backend():
    """
    Override the default 'anyio_backend' fixture.
    1. Forces the backend to 'asyncio' (aiosqlite does not run on trio).
    2. Promotes the scope to 'session' (solves 'ScopeMismatch').
    """
    return "asyncio"


@pytest.fixture(scope="function")
def client() -> TestClient:
    """
    Runs the app's lifespan around a TestClient.
    """
    assert settings.TEST_MODE is True, \
        "TEST_MODE was not set to True! Check your .env file or environment."

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# --- 1. Database Fixtures ---

@pytest.fixture(scope="function")
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    A brand new in-memory database per test.
    StaticPool keeps the single connection (and so the data) alive for the
    whole test.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    session = session_factory()
    try:
        yield session
    finally:
        await session.close()


@pytest.fixture(scope="function")
def seed(db_session: AsyncSession):
    """
    Returns a coroutine function that persists ORM rows.
    The identity map is cleared afterwards so every later read is a real
    round trip through the repository.
    """
    async def _seed(*rows) -> None:
        db_session.add_all(rows)
        await db_session.commit()
        db_session.expunge_all()
    return _seed


@pytest.fixture(scope="function")
async def seeded_db(seed) -> None:
    """
    Seeds the known carpool world used by the database-backed tests.

    Group A (TEST_GROUP_ID, has a schedule config):
        TEST_SLOT_ID            next Monday 07:30, empty
        TEST_SLOT_ID_SAME_TIME  next Monday 07:30, vehicle (7 seats) + driver, 2 children
        TEST_SLOT_ID_OTHER_TIME next Monday 08:00, other vehicle (override 2) + other driver, 2 children
        TEST_SLOT_ID_PAST       last Monday 07:30, empty
    Group B (TEST_OTHER_GROUP_ID, no schedule config):
        TEST_SLOT_ID_OTHER_GROUP next Monday 07:30, other vehicle + other driver
    """
    children = factories.ChildFactory.build_batch(4)
    same_time_assignment = factories.ScheduleSlotVehicleFactory.build(
        schedule_slot_id=TEST_SLOT_ID_SAME_TIME, vehicle_id=TEST_VEHICLE_ID, driver_id=TEST_DRIVER_ID
    )
    other_time_assignment = factories.ScheduleSlotVehicleFactory.build(
        schedule_slot_id=TEST_SLOT_ID_OTHER_TIME, vehicle_id=TEST_OTHER_VEHICLE_ID,
        driver_id=TEST_OTHER_DRIVER_ID, seat_override=2
    )

    await seed(
        factories.GroupFactory.build(id=TEST_GROUP_ID),
        factories.GroupFactory.build(id=TEST_OTHER_GROUP_ID),
        factories.GroupScheduleConfigFactory.build(group_id=TEST_GROUP_ID, schedule_hours=TEST_SCHEDULE_HOURS),
        factories.VehicleFactory.build(id=TEST_VEHICLE_ID, capacity=7),
        factories.VehicleFactory.build(id=TEST_OTHER_VEHICLE_ID, capacity=4),
        factories.UserFactory.build(id=TEST_DRIVER_ID),
        factories.UserFactory.build(id=TEST_OTHER_DRIVER_ID, timezone="Europe/Berlin"),
        factories.ChildFactory.build(id=TEST_CHILD_ID),
        *children,
        factories.ScheduleSlotFactory.build(id=TEST_SLOT_ID, group_id=TEST_GROUP_ID, datetime=NEXT_MONDAY_0730),
        factories.ScheduleSlotFactory.build(id=TEST_SLOT_ID_SAME_TIME, group_id=TEST_GROUP_ID, datetime=NEXT_MONDAY_0730),
        factories.ScheduleSlotFactory.build(id=TEST_SLOT_ID_OTHER_TIME, group_id=TEST_GROUP_ID, datetime=NEXT_MONDAY_0800),
        factories.ScheduleSlotFactory.build(id=TEST_SLOT_ID_PAST, group_id=TEST_GROUP_ID, datetime=LAST_MONDAY_0730),
        factories.ScheduleSlotFactory.build(id=TEST_SLOT_ID_OTHER_GROUP, group_id=TEST_OTHER_GROUP_ID, datetime=NEXT_MONDAY_0730),
        same_time_assignment,
        other_time_assignment,
        factories.ScheduleSlotVehicleFactory.build(
            schedule_slot_id=TEST_SLOT_ID_OTHER_GROUP, vehicle_id=TEST_OTHER_VEHICLE_ID, driver_id=TEST_OTHER_DRIVER_ID
        ),
        factories.ScheduleSlotChildFactory.build(
            schedule_slot_id=TEST_SLOT_ID_SAME_TIME, child_id=children[0].id, vehicle_assignment_id=same_time_assignment.id
        ),
        factories.ScheduleSlotChildFactory.build(
            schedule_slot_id=TEST_SLOT_ID_SAME_TIME, child_id=children[1].id, vehicle_assignment_id=same_time_assignment.id
        ),
        factories.ScheduleSlotChildFactory.build(
            schedule_slot_id=TEST_SLOT_ID_OTHER_TIME, child_id=children[2].id, vehicle_assignment_id=other_time_assignment.id
        ),
        factories.ScheduleSlotChildFactory.build(
            schedule_slot_id=TEST_SLOT_ID_OTHER_TIME, child_id=children[3].id, vehicle_assignment_id=other_time_assignment.id
        ),
    )


# --- 2. Repository Fixtures ---

@pytest.fixture(scope="function")
def repository(db_session: AsyncSession) -> ScheduleSlotRepository:
    return ScheduleSlotRepository(db=db_session)

@pytest.fixture(scope="function")
def mock_repository() -> ScheduleSlotRepository:
    """A repository double; every finder returns nothing until configured."""
    mock_repo = MagicMock(spec=ScheduleSlotRepository)
    mock_repo.find_schedule_slot_by_id = AsyncMock(return_value=None)
    mock_repo.find_schedule_slots_by_group_and_datetime = AsyncMock(return_value=[])
    mock_repo.find_future_schedule_slots_by_group = AsyncMock(return_value=[])
    mock_repo.find_schedule_slots_involving_parent = AsyncMock(return_value=[])
    mock_repo.list_schedule_slot_ids = AsyncMock(return_value=[])
    mock_repo.find_vehicle_by_id = AsyncMock(return_value=None)
    mock_repo.find_user_by_id = AsyncMock(return_value=None)
    mock_repo.find_group_schedule_config = AsyncMock(return_value=None)
    return mock_repo


# --- 3. Validator Fixtures ---

@pytest.fixture(scope="function")
def fixed_clock() -> FixedClock:
    return FixedClock(FIXED_NOW)

@pytest.fixture(scope="function")
def timing_validator(fixed_clock: FixedClock) -> TimingValidator:
    return TimingValidator(clock=fixed_clock)

@pytest.fixture(scope="function")
def capacity_calculator() -> CapacityCalculator:
    return CapacityCalculator()

@pytest.fixture(scope="function")
def schedule_config_validator() -> ScheduleConfigValidator:
    return ScheduleConfigValidator()

@pytest.fixture(scope="function")
def schedule_template_validator(repository: ScheduleSlotRepository) -> ScheduleTemplateValidator:
    return ScheduleTemplateValidator(repository=repository)

@pytest.fixture(scope="function")
def conflict_detector(repository: ScheduleSlotRepository) -> ConflictDetector:
    return ConflictDetector(repository=repository)

@pytest.fixture(scope="function")
def slot_integrity_validator(
    repository: ScheduleSlotRepository, capacity_calculator: CapacityCalculator
) -> SlotIntegrityValidator:
    return SlotIntegrityValidator(repository=repository, capacity_calculator=capacity_calculator)

@pytest.fixture(scope="function")
def validation_service(repository: ScheduleSlotRepository, fixed_clock: FixedClock) -> ValidationService:
    return ValidationService(repository=repository, clock=fixed_clock)

@pytest.fixture(scope="function")
def mocked_validation_service(mock_repository: ScheduleSlotRepository, fixed_clock: FixedClock) -> ValidationService:
    """Facade over the repository double, for tests that never touch the database."""
    return ValidationService(repository=mock_repository, clock=fixed_clock)
