"""Read-only aggregates over the catalog and the stock ledger."""

from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_
from sqlalchemy.orm import selectinload
from ..models import Category, Product, Transaction, TransactionType, Variation
from ..schemas import DashboardStats, TopProduct, StockMovementDay
from ..time_utils import day_window, start_of_day

UNCATEGORIZED = "Uncategorized"


def _ledger_query():
    return select(Transaction).options(
        selectinload(Transaction.variation).selectinload(Variation.product),
        selectinload(Transaction.user),
    )


async def _sum_quantity(db: AsyncSession, type_: TransactionType, start: datetime, end: datetime) -> int:
    res = await db.execute(
        select(func.coalesce(func.sum(Transaction.quantity), 0)).where(
            Transaction.type == type_,
            Transaction.created_at >= start,
            Transaction.created_at < end,
        )
    )
    return int(res.scalar_one() or 0)


async def dashboard_stats(db: AsyncSession) -> DashboardStats:
    start, end = day_window()
    total_products = await db.scalar(select(func.count()).select_from(Product))
    low_stock_count = await db.scalar(
        select(func.count()).select_from(Variation).where(Variation.is_low_stock)
    )
    return DashboardStats(
        total_products=total_products or 0,
        low_stock_count=low_stock_count or 0,
        today_stock_in=await _sum_quantity(db, TransactionType.stock_in, start, end),
        today_stock_out=await _sum_quantity(db, TransactionType.stock_out, start, end),
    )


async def top_products(db: AsyncSession, limit: int) -> list[TopProduct]:
    total_sold = func.coalesce(func.sum(Transaction.quantity), 0)
    stmt = (
        select(
            Product.id,
            Product.name,
            func.coalesce(Category.name, UNCATEGORIZED).label("category"),
            total_sold.label("total_sold"),
        )
        .select_from(Product)
        .outerjoin(Category, Product.category_id == Category.id)
        .outerjoin(Variation, Variation.product_id == Product.id)
        .outerjoin(
            Transaction,
            and_(Transaction.variation_id == Variation.id, Transaction.type == TransactionType.stock_out),
        )
        .group_by(Product.id, Product.name, Category.name)
        .order_by(total_sold.desc(), Product.id)
        .limit(limit)
    )
    res = await db.execute(stmt)
    return [
        TopProduct(product_id=row[0], product_name=row[1], category=row[2], total_sold=int(row[3] or 0))
        for row in res.all()
    ]


async def low_stock_variations(db: AsyncSession) -> list[Variation]:
    stmt = (
        select(Variation)
        .options(selectinload(Variation.product))
        .where(Variation.is_low_stock)
        .order_by(Variation.stock.asc(), Variation.id)
    )
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def transactions_in_range(
    db: AsyncSession,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    type_: Optional[TransactionType] = None,
) -> list[Transaction]:
    """Ledger entries with createdAt in [start, end], both bounds optional and inclusive, newest first."""
    stmt = _ledger_query()
    if start:
        stmt = stmt.where(Transaction.created_at >= start)
    if end:
        stmt = stmt.where(Transaction.created_at <= end)
    if type_:
        stmt = stmt.where(Transaction.type == type_)
    res = await db.execute(stmt.order_by(Transaction.created_at.desc(), Transaction.id.desc()))
    return list(res.scalars().all())


async def recent_transactions(db: AsyncSession, limit: int) -> list[Transaction]:
    stmt = _ledger_query().order_by(Transaction.created_at.desc(), Transaction.id.desc()).limit(limit)
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def stock_movement(db: AsyncSession, days: int) -> list[StockMovementDay]:
    """Daily stock-in/stock-out totals for the last `days` local days, oldest first."""
    first_day = start_of_day() - timedelta(days=days - 1)
    buckets = {
        (first_day + timedelta(days=offset)).date(): StockMovementDay(
            day=(first_day + timedelta(days=offset)).date().isoformat()
        )
        for offset in range(days)
    }
    res = await db.execute(
        select(Transaction.created_at, Transaction.type, Transaction.quantity).where(
            Transaction.created_at >= first_day,
            Transaction.type.in_([TransactionType.stock_in, TransactionType.stock_out]),
        )
    )
    for created_at, type_, quantity in res.all():
        bucket = buckets.get(created_at.date())
        if bucket is None:
            continue
        if type_ == TransactionType.stock_in:
            bucket.stock_in += quantity
        else:
            bucket.stock_out += quantity
    return list(buckets.values())
