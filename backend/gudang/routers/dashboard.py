from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from ..schemas import DashboardStats, TopProduct, StockMovementDay
from ..deps import get_db
from ..services import reporting

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
async def stats(db: AsyncSession = Depends(get_db)):
    return await reporting.dashboard_stats(db)


@router.get("/top-products", response_model=list[TopProduct])
async def top_products(db: AsyncSession = Depends(get_db), limit: int = Query(5, ge=1)):
    return await reporting.top_products(db, limit)


@router.get("/stock-movement", response_model=list[StockMovementDay])
async def stock_movement(db: AsyncSession = Depends(get_db), days: int = Query(7, ge=1, le=90)):
    return await reporting.stock_movement(db, days)
