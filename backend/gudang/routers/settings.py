from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from ..deps import get_db, require_role
from ..models import UserRole
from ..schemas import SystemSettingsOut, SystemSettingsSaved, SystemSettingsUpdate
from ..services import system_settings

router = APIRouter()

MASKED_KEY = "***hidden***"


def _masked(config: system_settings.SystemConfig) -> SystemSettingsOut:
    return SystemSettingsOut(
        openai_api_key=MASKED_KEY if config.openai_api_key else "",
        openai_model=config.openai_model,
        stock_alert_threshold=config.stock_alert_threshold,
    )


@router.get("/system", response_model=SystemSettingsOut)
async def read_system_settings(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_role(UserRole.admin)),
):
    return _masked(await system_settings.load_system_config(db))


@router.post("/system", response_model=SystemSettingsSaved)
async def save_system_settings(
    payload: SystemSettingsUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_role(UserRole.admin)),
):
    if not payload.openai_api_key or not payload.openai_model or payload.stock_alert_threshold is None:
        raise HTTPException(status_code=400, detail="All fields are required")
    config = await system_settings.update_system_config(
        db, payload.openai_api_key, payload.openai_model, payload.stock_alert_threshold
    )
    return SystemSettingsSaved(message="System settings updated successfully", settings=_masked(config))
