from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from fastapi import HTTPException, status
from ..models import Category, Product, Variation


async def resolve_category_id(db: AsyncSession, category_id: Optional[int]) -> Optional[int]:
    if category_id is None:
        return None
    res = await db.execute(select(Category.id).where(Category.id == category_id))
    if res.scalar_one_or_none() is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category not found")
    return category_id


async def resolve_product_id(db: AsyncSession, product_id: int) -> int:
    res = await db.execute(select(Product.id).where(Product.id == product_id))
    if res.scalar_one_or_none() is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Product not found")
    return product_id


async def get_category(db: AsyncSession, category_id: int) -> Category:
    res = await db.execute(select(Category).where(Category.id == category_id))
    category = res.scalar_one_or_none()
    if not category:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return category


async def get_product(db: AsyncSession, product_id: int, with_variations: bool = False) -> Product:
    options = [selectinload(Product.category)]
    if with_variations:
        options.append(selectinload(Product.variations))
    res = await db.execute(select(Product).options(*options).where(Product.id == product_id))
    product = res.scalar_one_or_none()
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


async def get_variation(db: AsyncSession, variation_id: int) -> Variation:
    res = await db.execute(
        select(Variation).options(selectinload(Variation.product)).where(Variation.id == variation_id)
    )
    variation = res.scalar_one_or_none()
    if not variation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Variation not found")
    return variation
