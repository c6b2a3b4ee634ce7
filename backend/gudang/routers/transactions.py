from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from ..models import TransactionType, User
from ..schemas import TransactionBase, TransactionDetail, TransactionCreate
from ..deps import get_db, get_current_user
from ..services import ledger, reporting
from ..time_utils import parse_iso_datetime

router = APIRouter()


def parse_date_range(start_date: str | None, end_date: str | None):
    try:
        start = parse_iso_datetime(start_date)
        end = parse_iso_datetime(end_date, end_of_day=True)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid date format, expected ISO-8601") from exc
    return start, end


@router.get("", response_model=list[TransactionDetail])
async def list_transactions(
    db: AsyncSession = Depends(get_db),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    type: TransactionType | None = Query(None),
):
    start, end = parse_date_range(start_date, end_date)
    return await reporting.transactions_in_range(db, start, end, type)


@router.get("/recent", response_model=list[TransactionDetail])
async def list_recent_transactions(
    db: AsyncSession = Depends(get_db),
    limit: int = Query(10, ge=1),
):
    return await reporting.recent_transactions(db, limit)


@router.post("", response_model=TransactionBase, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    payload: TransactionCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await ledger.record_transaction(
        db, payload.variation_id, payload.type, payload.quantity, current_user, payload.notes
    )
