"""
Database Seed Script

Drops and recreates all tables, then loads the demo data set:
one global admin, one manager per country, three members, two
restaurants with two menu items each, and two payment methods.

Every seeded user has the password ``password123``.

Run from project root: python scripts/seed.py
"""

import asyncio
import os
import sys
from decimal import Decimal

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.security import hash_password
from app.database import Base, async_session_maker, engine
from app.models import Country, MenuItem, PaymentMethod, Restaurant, Role, User

DEMO_PASSWORD = "password123"

USERS = [
    ("Nick Fury", "nick@avengers.com", Role.ADMIN, Country.AMERICA),
    ("Captain Marvel", "cm@company.com", Role.MANAGER, Country.INDIA),
    ("Captain America", "ca@company.com", Role.MANAGER, Country.AMERICA),
    ("Thanos", "thanos@company.com", Role.MEMBER, Country.INDIA),
    ("Thor", "thor@company.com", Role.MEMBER, Country.INDIA),
    ("Travis", "travis@company.com", Role.MEMBER, Country.AMERICA),
]

RESTAURANTS = [
    {
        "name": "Bombay Tadka",
        "country": Country.INDIA,
        "description": "Indian cuisine",
        "menu": [
            ("Butter Chicken", "8.99", "Main"),
            ("Paneer Tikka", "7.50", "Starter"),
        ],
    },
    {
        "name": "NY Deli",
        "country": Country.AMERICA,
        "description": "American sandwiches",
        "menu": [
            ("Club Sandwich", "9.99", "Main"),
            ("Caesar Salad", "6.50", "Starter"),
        ],
    },
]


async def seed() -> None:
    """Reset the schema and insert the demo data."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    pwd = hash_password(DEMO_PASSWORD)

    async with async_session_maker() as session:
        users = [
            User(name=name, email=email, password=pwd, role=role, country=country)
            for name, email, role, country in USERS
        ]
        session.add_all(users)

        for data in RESTAURANTS:
            restaurant = Restaurant(
                name=data["name"],
                country=data["country"],
                description=data["description"],
            )
            session.add(restaurant)
            await session.flush()
            session.add_all([
                MenuItem(
                    restaurant_id=restaurant.id,
                    name=name,
                    price=Decimal(price),
                    category=category,
                )
                for name, price, category in data["menu"]
            ])

        await session.flush()
        session.add_all([
            PaymentMethod(user_id=users[0].id, type="CARD", details={"last4": "4242"}),
            PaymentMethod(user_id=users[1].id, type="UPI", details={"id": "captain@upi"}),
        ])
        await session.commit()

    await engine.dispose()

    print("=" * 60)
    print("SEED COMPLETE")
    print("=" * 60)
    print(f"   Users: {len(USERS)} (password: {DEMO_PASSWORD})")
    for name, email, role, country in USERS:
        print(f"     - {email:<22} {role.value:<8} {country.value}")
    print(f"   Restaurants: {len(RESTAURANTS)}")
    print(f"   Menu items: {sum(len(r['menu']) for r in RESTAURANTS)}")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(seed())
