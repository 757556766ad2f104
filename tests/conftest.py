import os
from datetime import date
from decimal import Decimal
from typing import AsyncGenerator, Awaitable, Callable, Optional

# Settings are read at import time; point them at a throwaway database before the app loads.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BACKFILL_SERIALS_ON_STARTUP", "false")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.main import app
from app.core.config import SchoolBranding, get_school_branding
from app.core.models import FeeTransaction, Student
from app.db.session import Base, get_db


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_BRANDING = SchoolBranding(
    name="Test Public School",
    address_line="1 School Road, Testville",
    logo_url=None,
    academic_session="2025-26",
)


@pytest.fixture()
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh in-memory database per test; StaticPool keeps one shared connection."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    yield factory
    await engine.dispose()


@pytest.fixture()
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
async def client(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app; each request gets its own session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_school_branding] = lambda: TEST_BRANDING
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


StudentFactory = Callable[..., Awaitable[Student]]
FeeFactory = Callable[..., Awaitable[FeeTransaction]]


@pytest.fixture()
def make_student(session_factory: async_sessionmaker) -> StudentFactory:
    counter = {"n": 0}

    async def _make(
        name: str = "Asha Verma",
        admission_number: Optional[str] = None,
        grade: Optional[str] = "5",
        section: Optional[str] = "A",
        yearly_fee_amount: Decimal = Decimal("24000.00"),
        **extra,
    ) -> Student:
        counter["n"] += 1
        student = Student(
            admission_number=admission_number or f"ADM{counter['n']:03d}",
            name=name,
            date_of_birth=date(2015, 6, 1),
            admission_date=date(2021, 4, 1),
            grade=grade,
            section=section,
            yearly_fee_amount=yearly_fee_amount,
            **extra,
        )
        async with session_factory() as session:
            session.add(student)
            await session.commit()
        return student

    return _make


@pytest.fixture()
def make_fee(session_factory: async_sessionmaker) -> FeeFactory:
    counter = {"n": 0}

    async def _make(
        student: Student,
        amount: Decimal = Decimal("1000.00"),
        payment_date: date = date(2025, 5, 10),
        receipt_serial: Optional[int] = None,
        **extra,
    ) -> FeeTransaction:
        counter["n"] += 1
        txn = FeeTransaction(
            student_id=student.id,
            transaction_id=f"TXNTEST{counter['n']:05d}",
            amount=amount,
            payment_date=payment_date,
            payment_mode="cash",
            receipt_serial=receipt_serial,
            **extra,
        )
        async with session_factory() as session:
            session.add(txn)
            await session.commit()
        return txn

    return _make
