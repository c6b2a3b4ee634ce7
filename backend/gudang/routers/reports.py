import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession
from ..models import TransactionType
from ..deps import get_db
from ..services import reporting
from ..services.excel import XLSX_MEDIA_TYPE, build_transactions_workbook, report_filename
from .transactions import parse_date_range

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/excel")
async def export_excel(
    db: AsyncSession = Depends(get_db),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    type: str | None = Query(None),
):
    start, end = parse_date_range(start_date, end_date)
    if start is None or end is None:
        raise HTTPException(status_code=400, detail="Start date and end date are required")
    type_filter = None
    if type and type != "all":
        try:
            type_filter = TransactionType(type)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail="Unknown transaction type") from exc
    entries = await reporting.transactions_in_range(db, start, end, type_filter)
    content = build_transactions_workbook(entries)
    filename = report_filename(start.date().isoformat(), end.date().isoformat())
    logger.info("Excel report %s: %d rows", filename, len(entries))
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
