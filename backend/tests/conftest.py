"""
Pytest fixtures for the stock API.

Every test gets a fresh in-memory SQLite database; the app's session
dependency is pointed at it and requests go through httpx's ASGI transport.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("RATE_LIMIT_LOGIN_PER_MIN", "1000")
os.environ.setdefault("OPENAI_API_KEY", "")

from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from gudang.db import Base, get_session
from gudang.main import app
from gudang.models import Category, Product, User, UserRole, Variation
from gudang.security import hash_password, issue_tokens
from gudang.services import system_settings


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def _session_override():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _session_override
    system_settings.invalidate_system_config()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    system_settings.invalidate_system_config()


async def _create_user(db, username, role, password="secret123"):
    user = User(
        username=username,
        password_hash=hash_password(password),
        email=f"{username}@example.com",
        name=username.title(),
        role=role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(db):
    return await _create_user(db, "admin", UserRole.admin)


@pytest_asyncio.fixture
async def staff_user(db):
    return await _create_user(db, "kepala", UserRole.kepala_gudang)


def _bearer(user):
    access, _ = issue_tokens(user.id)
    return {"Authorization": f"Bearer {access}"}


@pytest.fixture
def admin_headers(admin_user):
    return _bearer(admin_user)


@pytest.fixture
def staff_headers(staff_user):
    return _bearer(staff_user)


@pytest.fixture
def make_category(db):
    async def _make(name="Kaos", description=None):
        category = Category(name=name, description=description)
        db.add(category)
        await db.commit()
        await db.refresh(category)
        return category

    return _make


@pytest.fixture
def make_product(db):
    async def _make(sku="P1", name="Kaos Polos", category=None):
        product = Product(sku=sku, name=name, category_id=category.id if category else None)
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    return _make


@pytest.fixture
def make_variation(db):
    async def _make(product, sku="V1", stock=0, min_stock=10, color=None, size=None, price=None):
        variation = Variation(
            product_id=product.id,
            sku=sku,
            stock=stock,
            min_stock=min_stock,
            color=color,
            size=size,
            price=Decimal(price) if price is not None else None,
        )
        db.add(variation)
        await db.commit()
        await db.refresh(variation)
        return variation

    return _make
