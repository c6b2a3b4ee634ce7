"""
Text insights from an external chat-completion provider.

Both entry points always return a well-formed payload: any provider failure
(missing key, network error, malformed JSON) is logged and replaced by the
fallback result so the calling endpoint still answers 200.
"""

import json
import logging
from typing import Any

from openai import AsyncOpenAI

from ..config import get_settings
from ..schemas import PerformanceAnalysis, RestockRecommendations
from .system_settings import SystemConfig

logger = logging.getLogger(__name__)
settings = get_settings()

PERFORMANCE_SYSTEM_PROMPT = (
    "Anda adalah ahli analisis ritel. Analisis data performa produk dan berikan "
    "wawasan yang dapat ditindaklanjuti dalam format JSON berbahasa Indonesia."
)
RESTOCK_SYSTEM_PROMPT = (
    "Anda adalah ahli manajemen inventori. Prioritaskan item stok rendah untuk "
    "restock dan jawab dalam format JSON berbahasa Indonesia."
)


class InsightProviderError(Exception):
    pass


def performance_fallback() -> PerformanceAnalysis:
    return PerformanceAnalysis(
        insights=["AI analysis unavailable at the moment"],
        recommendations=["Please check your OpenAI API configuration"],
    )


def restock_fallback() -> RestockRecommendations:
    return RestockRecommendations(
        recommendations=["AI recommendations unavailable at the moment"],
        total_estimated_cost=0,
    )


async def _complete_json(config: SystemConfig, system_prompt: str, user_prompt: str) -> dict:
    if not config.openai_api_key:
        raise InsightProviderError("OpenAI API key is not configured")
    async with AsyncOpenAI(api_key=config.openai_api_key, timeout=settings.openai_timeout_sec) as client:
        response = await client.chat.completions.create(
            model=config.openai_model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            response_format={"type": "json_object"},
        )
    content = response.choices[0].message.content
    if not content:
        raise InsightProviderError("Provider returned an empty message")
    data = json.loads(content)
    if not isinstance(data, dict):
        raise InsightProviderError("Provider returned a non-object JSON payload")
    return data


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _as_strings(value: Any) -> list[str]:
    return [str(item) for item in _as_list(value)]


def _as_number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


async def analyze_product_performance(products: list[dict], config: SystemConfig) -> PerformanceAnalysis:
    prompt = (
        "Analisis data penjualan produk berikut.\n"
        f"Products: {json.dumps(products, default=str)}\n"
        'Jawab dengan JSON: {"topPerformers": [...], "underPerformers": [...], '
        '"insights": [...], "recommendations": [...]}'
    )
    try:
        data = await _complete_json(config, PERFORMANCE_SYSTEM_PROMPT, prompt)
    except Exception:
        logger.warning("Product performance analysis failed", exc_info=True)
        return performance_fallback()
    return PerformanceAnalysis(
        top_performers=_as_list(data.get("topPerformers")),
        under_performers=_as_list(data.get("underPerformers")),
        insights=_as_strings(data.get("insights")),
        recommendations=_as_strings(data.get("recommendations")),
    )


async def generate_restock_recommendations(items: list[dict], config: SystemConfig) -> RestockRecommendations:
    prompt = (
        "Analisis item stok rendah berikut dan susun rekomendasi restock.\n"
        f"Low Stock Items: {json.dumps(items, default=str)}\n"
        'Jawab dengan JSON: {"urgentItems": [...], "mediumPriority": [...], '
        '"recommendations": [...], "totalEstimatedCost": 0}'
    )
    try:
        data = await _complete_json(config, RESTOCK_SYSTEM_PROMPT, prompt)
    except Exception:
        logger.warning("Restock recommendation failed", exc_info=True)
        return restock_fallback()
    return RestockRecommendations(
        urgent_items=_as_list(data.get("urgentItems")),
        medium_priority=_as_list(data.get("mediumPriority")),
        recommendations=_as_strings(data.get("recommendations")),
        total_estimated_cost=_as_number(data.get("totalEstimatedCost")),
    )
