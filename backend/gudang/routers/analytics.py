from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from ..schemas import PerformanceAnalysis, RestockRecommendations, VariationWithProduct
from ..deps import get_db
from ..services import insights, reporting
from ..services.system_settings import load_system_config

router = APIRouter()

PERFORMANCE_SAMPLE_SIZE = 50


@router.get("/performance", response_model=PerformanceAnalysis)
async def performance(db: AsyncSession = Depends(get_db)):
    products = await reporting.top_products(db, PERFORMANCE_SAMPLE_SIZE)
    config = await load_system_config(db)
    payload = [p.model_dump(by_alias=True, mode="json") for p in products]
    return await insights.analyze_product_performance(payload, config)


@router.get("/restock", response_model=RestockRecommendations)
async def restock(db: AsyncSession = Depends(get_db)):
    items = await reporting.low_stock_variations(db)
    config = await load_system_config(db)
    payload = [VariationWithProduct.model_validate(v).model_dump(by_alias=True, mode="json") for v in items]
    return await insights.generate_restock_recommendations(payload, config)
