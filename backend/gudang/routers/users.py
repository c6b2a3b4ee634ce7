from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from ..deps import get_db, require_role
from ..models import User, UserRole
from ..schemas import UserBase, UserCreate, UserUpdate
from ..security import hash_password
from .auth import ensure_unique_identity

router = APIRouter()


@router.get("", response_model=list[UserBase])
async def list_users(db: AsyncSession = Depends(get_db), current_user=Depends(require_role(UserRole.admin))):
    res = await db.execute(select(User).order_by(User.id))
    return res.scalars().all()


@router.post("", response_model=UserBase, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_role(UserRole.admin)),
):
    await ensure_unique_identity(db, payload.username, payload.email)
    user = User(
        username=payload.username,
        password_hash=hash_password(payload.password),
        email=payload.email,
        name=payload.name,
        role=payload.role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@router.patch("/{user_id}", response_model=UserBase)
async def update_user(
    user_id: int,
    payload: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_role(UserRole.admin)),
):
    res = await db.execute(select(User).where(User.id == user_id))
    user = res.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="Not found")
    if payload.role is not None:
        user.role = payload.role
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user
