import asyncio
from decimal import Decimal
from sqlalchemy import select
from gudang.db import AsyncSessionLocal
from gudang.models import User, UserRole, Category, Product, Variation
from gudang.security import hash_password


async def run():
    async with AsyncSessionLocal() as session:
        await seed_users(session)
        await seed_categories(session)
        await seed_products(session)
        await session.commit()


async def seed_users(session):
    users = [
        ("admin", "admin123", "admin@example.com", "Administrator", UserRole.admin),
        ("kepala", "kepala123", "kepala@example.com", "Kepala Gudang", UserRole.kepala_gudang),
    ]
    for username, pwd, email, name, role in users:
        res = await session.execute(select(User).where(User.username == username))
        if res.scalar_one_or_none():
            continue
        session.add(User(username=username, password_hash=hash_password(pwd), email=email, name=name, role=role))


async def seed_categories(session):
    for name, description in [
        ("Kaos", "Kaos dan atasan kasual"),
        ("Celana", "Celana panjang dan pendek"),
        ("Aksesoris", None),
    ]:
        res = await session.execute(select(Category).where(Category.name == name))
        if res.scalar_one_or_none():
            continue
        session.add(Category(name=name, description=description))
    await session.flush()


async def seed_products(session):
    res_cat = await session.execute(select(Category))
    categories = {c.name: c for c in res_cat.scalars().all()}
    sample = [
        ("KAOS-001", "Kaos Polos", "Kaos", [("Hitam", "M", 40), ("Hitam", "L", 8), ("Putih", "M", 0)], "75000"),
        ("CLN-001", "Celana Chino", "Celana", [("Krem", "32", 15), ("Navy", "34", 4)], "185000"),
        ("TOPI-001", "Topi Baseball", "Aksesoris", [(None, None, 25)], "55000"),
    ]
    for sku, name, category_name, variations, price in sample:
        res = await session.execute(select(Product).where(Product.sku == sku))
        if res.scalar_one_or_none():
            continue
        category = categories.get(category_name)
        product = Product(sku=sku, name=name, category_id=category.id if category else None)
        session.add(product)
        await session.flush()
        for idx, (color, size, stock) in enumerate(variations, start=1):
            session.add(
                Variation(
                    product_id=product.id,
                    sku=f"{sku}-{idx:02d}",
                    color=color,
                    size=size,
                    stock=stock,
                    min_stock=10,
                    price=Decimal(price),
                )
            )


if __name__ == "__main__":
    asyncio.run(run())
