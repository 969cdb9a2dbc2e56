import os

# Settings are cached on first import, so configure them before app imports
os.environ["ENV_MODE"] = "development"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["COOKIE_NAME"] = "token"

from decimal import Decimal
from types import SimpleNamespace

import httpx
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.core.security import hash_password
from app.database import Base, build_engine, get_db
from app.main import app
from app.models import Country, MenuItem, PaymentMethod, Restaurant, Role, User
from app.services.policy import Actor

PASSWORD = "password123"


@pytest_asyncio.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def world(session_maker):
    """Users of every role in both countries, one restaurant per country."""
    pwd = hash_password(PASSWORD)
    async with session_maker() as session:
        users = {
            "admin": User(name="Nick Fury", email="nick@avengers.com", password=pwd,
                          role=Role.ADMIN, country=Country.AMERICA),
            "manager_india": User(name="Captain Marvel", email="cm@company.com", password=pwd,
                                  role=Role.MANAGER, country=Country.INDIA),
            "manager_america": User(name="Captain America", email="ca@company.com", password=pwd,
                                    role=Role.MANAGER, country=Country.AMERICA),
            "member_india": User(name="Thor", email="thor@company.com", password=pwd,
                                 role=Role.MEMBER, country=Country.INDIA),
            "other_member_india": User(name="Thanos", email="thanos@company.com", password=pwd,
                                       role=Role.MEMBER, country=Country.INDIA),
            "member_america": User(name="Travis", email="travis@company.com", password=pwd,
                                   role=Role.MEMBER, country=Country.AMERICA),
        }
        session.add_all(users.values())

        india = Restaurant(name="Bombay Tadka", country=Country.INDIA, description="Indian cuisine")
        america = Restaurant(name="NY Deli", country=Country.AMERICA, description="American sandwiches")
        session.add_all([india, america])
        await session.flush()

        butter_chicken = MenuItem(restaurant_id=india.id, name="Butter Chicken",
                                  price=Decimal("8.99"), category="Main")
        paneer_tikka = MenuItem(restaurant_id=india.id, name="Paneer Tikka",
                                price=Decimal("7.50"), category="Starter")
        club_sandwich = MenuItem(restaurant_id=america.id, name="Club Sandwich",
                                 price=Decimal("9.99"), category="Main", is_available=False)
        session.add_all([butter_chicken, paneer_tikka, club_sandwich])
        await session.flush()

        card = PaymentMethod(user_id=users["admin"].id, type="CARD", details={"last4": "4242"})
        session.add(card)
        await session.commit()

        return SimpleNamespace(
            users=users,
            actors={key: Actor.from_user(user) for key, user in users.items()},
            india=india,
            america=america,
            butter_chicken=butter_chicken,
            paneer_tikka=paneer_tikka,
            club_sandwich=club_sandwich,
            card=card,
        )


@pytest_asyncio.fixture
async def client(session_maker):
    """Anonymous client with the app bound to the test database."""

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    ) as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def login(session_maker, world):
    """Factory returning a client logged in as one of the ``world`` users."""
    clients = []

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async def _login(key: str) -> httpx.AsyncClient:
        client = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url="http://testserver",
        )
        clients.append(client)
        response = await client.post(
            "/api/auth/login",
            json={"email": world.users[key].email, "password": PASSWORD},
        )
        assert response.status_code == 200, response.text
        return client

    yield _login

    for client in clients:
        await client.aclose()
    app.dependency_overrides.clear()
