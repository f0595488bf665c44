"""Shared test fixtures."""
import os

# Settings are read at import time; point them at a throwaway database first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./clinicslots-test.db")
os.environ.setdefault("CLINIC_TIMEZONE", "UTC")
os.environ.setdefault("ENV", "test")

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402
from sqlmodel import SQLModel, create_engine  # noqa: E402

import clinicslots.models  # noqa: E402,F401 - register tables
from clinicslots.models.appointment import Appointment, AppointmentStatus  # noqa: E402

TENANT = "clinic-a"
OTHER_TENANT = "clinic-b"


@pytest.fixture
def make_appointment():
    """Build an in-memory appointment (not persisted)."""
    def _create(
        appointment_id: str,
        start: datetime,
        duration: int = 30,
        status: AppointmentStatus | str = AppointmentStatus.SCHEDULED,
    ) -> Appointment:
        return Appointment(
            id=appointment_id,
            tenant_id=TENANT,
            patient_id="p-1",
            patient_name="Ana Torres",
            date=start,
            duration=duration,
            status=status,
        )
    return _create


@pytest.fixture
def client(tmp_path):
    """FastAPI test client on a fresh SQLite database."""
    from clinicslots.core.db import get_session
    from clinicslots.main import app

    db_path = tmp_path / "clinicslots.db"
    sync_engine = create_engine(f"sqlite:///{db_path}")
    SQLModel.metadata.create_all(sync_engine)
    sync_engine.dispose()

    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

    async def _get_session():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _get_session
    with TestClient(app, headers={"X-Tenant-ID": TENANT}) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def patient(client):
    """A registered patient of the default tenant."""
    response = client.post(
        "/api/v1/patients",
        json={"record_number": "HC-001", "name": "Ana Torres", "age": 34, "phone": "555-0101"},
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def doctor(client):
    """A registered doctor of the default tenant."""
    response = client.post(
        "/api/v1/doctors",
        json={"name": "Dra. García", "specialty": "Medicina general"},
    )
    assert response.status_code == 201
    return response.json()
