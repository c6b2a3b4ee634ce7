from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from sqlalchemy.orm import selectinload
from ..models import Product
from ..schemas import ProductBase, ProductDetail, ProductCreate, ProductUpdate
from ..deps import get_db
from ..services.catalog import get_product, resolve_category_id
from ..services.ledger import has_ledger_entries, tx

router = APIRouter()


@router.get("", response_model=list[ProductBase])
async def list_products(
    db: AsyncSession = Depends(get_db),
    q: str | None = Query(None),
    category_id: int | None = Query(None, alias="categoryId"),
):
    stmt = select(Product).options(selectinload(Product.category))
    if q:
        stmt = stmt.where(or_(Product.sku.ilike(f"%{q}%"), Product.name.ilike(f"%{q}%")))
    if category_id:
        stmt = stmt.where(Product.category_id == category_id)
    res = await db.execute(stmt.order_by(Product.created_at.desc(), Product.id.desc()))
    return res.scalars().all()


@router.get("/{product_id}", response_model=ProductDetail)
async def read_product(product_id: int, db: AsyncSession = Depends(get_db)):
    return await get_product(db, product_id, with_variations=True)


@router.post("", response_model=ProductBase, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    db: AsyncSession = Depends(get_db),
):
    await resolve_category_id(db, payload.category_id)
    product = Product(**payload.dict())
    db.add(product)
    await db.commit()
    await db.refresh(product, ["category"])
    return product


@router.patch("/{product_id}", response_model=ProductBase)
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: AsyncSession = Depends(get_db),
):
    product = await get_product(db, product_id)
    data = payload.model_dump(exclude_unset=True)
    if "category_id" in data:
        await resolve_category_id(db, data["category_id"])
    for k, v in data.items():
        setattr(product, k, v)
    db.add(product)
    await db.commit()
    await db.refresh(product, ["category"])
    return product


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
):
    product = await get_product(db, product_id, with_variations=True)
    if await has_ledger_entries(db, [v.id for v in product.variations]):
        raise HTTPException(status_code=400, detail="Product has stock transactions and cannot be deleted")
    async with tx(db):
        await db.delete(product)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
