"""
Runtime configuration kept in the ``system_settings`` key/value table.

The rows are read into a typed ``SystemConfig`` once per process and cached.
Writes go through ``set_system_setting`` (insert if absent, else update) and
``update_system_config`` refreshes the cache afterwards.
"""

import logging
from typing import Optional
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from ..config import get_settings
from ..models import SystemSetting
from ..time_utils import local_now
from .ledger import tx

logger = logging.getLogger(__name__)
settings = get_settings()

OPENAI_API_KEY = "openaiApiKey"
OPENAI_MODEL = "openaiModel"
STOCK_ALERT_THRESHOLD = "stockAlertThreshold"


class SystemConfig(BaseModel):
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    stock_alert_threshold: int = 10


_cached: Optional[SystemConfig] = None


async def get_system_setting(db: AsyncSession, key: str) -> Optional[SystemSetting]:
    res = await db.execute(select(SystemSetting).where(SystemSetting.key == key).limit(1))
    return res.scalar_one_or_none()


async def list_system_settings(db: AsyncSession) -> list[SystemSetting]:
    res = await db.execute(select(SystemSetting).order_by(SystemSetting.key))
    return list(res.scalars().all())


async def set_system_setting(db: AsyncSession, key: str, value: str) -> SystemSetting:
    """Upsert one key. The caller owns the commit."""
    setting = await get_system_setting(db, key)
    if setting is None:
        setting = SystemSetting(key=key, value=value, updated_at=local_now())
    else:
        setting.value = value
        setting.updated_at = local_now()
    db.add(setting)
    await db.flush()
    return setting


def _parse_threshold(raw: Optional[str]) -> int:
    if raw is None:
        return settings.default_stock_alert_threshold
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", STOCK_ALERT_THRESHOLD, raw)
        return settings.default_stock_alert_threshold


async def reload_system_config(db: AsyncSession) -> SystemConfig:
    global _cached
    stored = {row.key: row.value for row in await list_system_settings(db)}
    _cached = SystemConfig(
        openai_api_key=stored.get(OPENAI_API_KEY) or settings.openai_api_key,
        openai_model=stored.get(OPENAI_MODEL) or settings.openai_model,
        stock_alert_threshold=_parse_threshold(stored.get(STOCK_ALERT_THRESHOLD)),
    )
    return _cached


async def load_system_config(db: AsyncSession) -> SystemConfig:
    if _cached is None:
        return await reload_system_config(db)
    return _cached


def invalidate_system_config() -> None:
    global _cached
    _cached = None


async def update_system_config(
    db: AsyncSession, openai_api_key: str, openai_model: str, stock_alert_threshold: int
) -> SystemConfig:
    values = {
        OPENAI_API_KEY: openai_api_key,
        OPENAI_MODEL: openai_model,
        STOCK_ALERT_THRESHOLD: str(stock_alert_threshold),
    }
    async with tx(db):
        for key, value in values.items():
            await set_system_setting(db, key, value)
    logger.info("System settings updated: %s", ", ".join(values))
    return await reload_system_config(db)
