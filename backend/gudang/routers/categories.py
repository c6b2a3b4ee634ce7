from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from ..models import Category, Product
from ..schemas import CategoryBase, CategoryCreate, CategoryUpdate
from ..deps import get_db
from ..services.catalog import get_category
from ..services.ledger import tx

router = APIRouter()


@router.get("", response_model=list[CategoryBase])
async def list_categories(db: AsyncSession = Depends(get_db)):
    res = await db.execute(select(Category).order_by(Category.name, Category.id))
    return res.scalars().all()


@router.post("", response_model=CategoryBase, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    db: AsyncSession = Depends(get_db),
):
    category = Category(**payload.dict())
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return category


@router.patch("/{category_id}", response_model=CategoryBase)
async def update_category(
    category_id: int,
    payload: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
):
    category = await get_category(db, category_id)
    for k, v in payload.model_dump(exclude_unset=True).items():
        setattr(category, k, v)
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return category


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
):
    category = await get_category(db, category_id)
    async with tx(db):
        # products fall back to "Uncategorized"
        await db.execute(update(Product).where(Product.category_id == category_id).values(category_id=None))
        await db.delete(category)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
