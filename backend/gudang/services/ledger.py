import logging
from contextlib import asynccontextmanager
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func
from fastapi import HTTPException, status
from ..models import Transaction, TransactionType, Variation, User
from ..time_utils import local_now

logger = logging.getLogger(__name__)


@asynccontextmanager
async def tx(db: AsyncSession):
    """
    Transaction helper tolerant to autobegin.
    If no transaction is active, opens one via begin().
    If a transaction is already active (autobegin after a SELECT),
    performs work and commits/rolls back manually.
    """
    if not db.in_transaction():
        async with db.begin():
            yield
    else:
        try:
            yield
            await db.commit()
        except Exception:
            await db.rollback()
            raise


def stock_delta(type_: TransactionType, quantity: int) -> int:
    """
    Signed change a ledger entry applies to its variation's stock.

    Stock-in adds and stock-out subtracts the given magnitude. Return and
    cancel entries carry a caller-signed quantity that is applied as is:
    a return restocks (positive), a cancel takes stock back out (negative).
    """
    if type_ == TransactionType.stock_in:
        return quantity
    if type_ == TransactionType.stock_out:
        return -quantity
    return quantity


async def record_transaction(
    db: AsyncSession,
    variation_id: int,
    type_: TransactionType,
    quantity: int,
    user: User,
    notes: Optional[str] = None,
) -> Transaction:
    res = await db.execute(select(Variation.id).where(Variation.id == variation_id))
    if res.scalar_one_or_none() is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Variation not found")
    delta = stock_delta(type_, quantity)
    async with tx(db):
        entry = Transaction(
            variation_id=variation_id,
            type=type_,
            quantity=quantity,
            notes=notes,
            user_id=user.id,
            created_at=local_now(),
        )
        db.add(entry)
        await db.flush()
        # evaluated by the database so concurrent entries don't lose updates
        await db.execute(
            update(Variation).where(Variation.id == variation_id).values(stock=Variation.stock + delta)
        )
    await db.refresh(entry)
    logger.info(
        "Recorded transaction %s: variation=%s type=%s quantity=%s delta=%s user=%s",
        entry.id,
        variation_id,
        type_.value,
        quantity,
        delta,
        user.id,
    )
    return entry


async def has_ledger_entries(db: AsyncSession, variation_ids: list[int]) -> bool:
    if not variation_ids:
        return False
    res = await db.execute(
        select(func.count()).select_from(Transaction).where(Transaction.variation_id.in_(variation_ids))
    )
    return res.scalar_one() > 0
