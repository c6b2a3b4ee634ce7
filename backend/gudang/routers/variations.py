from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from ..models import Variation
from ..schemas import VariationBase, VariationWithProduct, VariationCreate, VariationUpdate
from ..deps import get_db
from ..services.catalog import get_variation, resolve_product_id
from ..services.ledger import has_ledger_entries, tx
from ..services.reporting import low_stock_variations
from ..services.system_settings import load_system_config

router = APIRouter()


@router.get("", response_model=list[VariationWithProduct])
async def list_variations(
    db: AsyncSession = Depends(get_db),
    product_id: int | None = Query(None, alias="productId"),
):
    stmt = select(Variation).options(selectinload(Variation.product))
    if product_id:
        stmt = stmt.where(Variation.product_id == product_id)
    res = await db.execute(stmt.order_by(Variation.product_id, Variation.id))
    return res.scalars().all()


@router.get("/low-stock", response_model=list[VariationWithProduct])
async def list_low_stock(db: AsyncSession = Depends(get_db)):
    return await low_stock_variations(db)


@router.get("/{variation_id}", response_model=VariationWithProduct)
async def read_variation(variation_id: int, db: AsyncSession = Depends(get_db)):
    return await get_variation(db, variation_id)


@router.post("", response_model=VariationBase, status_code=status.HTTP_201_CREATED)
async def create_variation(
    payload: VariationCreate,
    db: AsyncSession = Depends(get_db),
):
    await resolve_product_id(db, payload.product_id)
    data = payload.model_dump()
    if data["min_stock"] is None:
        config = await load_system_config(db)
        data["min_stock"] = config.stock_alert_threshold
    variation = Variation(**data)
    db.add(variation)
    await db.commit()
    await db.refresh(variation)
    return variation


@router.patch("/{variation_id}", response_model=VariationBase)
async def update_variation(
    variation_id: int,
    payload: VariationUpdate,
    db: AsyncSession = Depends(get_db),
):
    variation = await get_variation(db, variation_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("product_id") is not None:
        await resolve_product_id(db, data["product_id"])
    for k, v in data.items():
        if v is None and k in {"product_id", "sku", "stock", "min_stock"}:
            continue
        setattr(variation, k, v)
    db.add(variation)
    await db.commit()
    await db.refresh(variation)
    return variation


@router.delete("/{variation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_variation(
    variation_id: int,
    db: AsyncSession = Depends(get_db),
):
    variation = await get_variation(db, variation_id)
    if await has_ledger_entries(db, [variation.id]):
        raise HTTPException(status_code=400, detail="Variation has stock transactions and cannot be deleted")
    async with tx(db):
        await db.delete(variation)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
