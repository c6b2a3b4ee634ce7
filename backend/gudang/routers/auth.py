from fastapi import APIRouter, Depends, HTTPException, status, Response, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from ..models import User, UserRole
from ..schemas import TokenPair, LoginRequest, UserBase, UserRegister, ProfileUpdate
from ..security import (
    hash_password,
    verify_password,
    decode_token,
    issue_tokens,
    access_token_ttl,
    refresh_token_ttl,
)
from ..config import get_settings
from ..deps import get_db, get_current_user
from ..rate_limit import limiter


router = APIRouter()
settings = get_settings()


async def ensure_unique_identity(db: AsyncSession, username: str, email: str, exclude_id: int | None = None):
    stmt = select(User).where(or_(User.username == username, User.email == email))
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    existing = await db.execute(stmt)
    if existing.scalars().first():
        raise HTTPException(status_code=400, detail="Username or email already exists")


@router.post("/register", response_model=UserBase, status_code=status.HTTP_201_CREATED)
async def register(payload: UserRegister, db: AsyncSession = Depends(get_db)):
    await ensure_unique_identity(db, payload.username, payload.email)
    user = User(
        username=payload.username,
        password_hash=hash_password(payload.password),
        email=payload.email,
        name=payload.name,
        role=UserRole.kepala_gudang,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@router.post("/login", response_model=TokenPair)
@limiter.limit(f"{settings.rate_limit_login_per_min}/minute")
async def login(request: Request, response: Response, payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    username = payload.username.strip()
    if not username or not payload.password:
        raise HTTPException(status_code=400, detail="Missing credentials")
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return _token_response(response, user)


@router.post("/refresh", response_model=TokenPair)
async def refresh(request: Request, response: Response, db: AsyncSession = Depends(get_db)):
    token = request.cookies.get("refresh_token")
    if not token:
        auth = request.headers.get("Authorization")
        if auth and auth.lower().startswith("bearer "):
            token = auth.split(" ", 1)[1]
    if not token:
        raise HTTPException(status_code=401, detail="No refresh token")
    payload = decode_token(token)
    if payload.get("type") != "refresh":
        raise HTTPException(status_code=401, detail="Invalid token type")
    result = await db.execute(select(User).where(User.id == int(payload.get("sub"))))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return _token_response(response, user)


@router.post("/logout")
async def logout(response: Response, current_user: User = Depends(get_current_user)):
    response.delete_cookie("access_token")
    response.delete_cookie("refresh_token")
    return {"detail": "ok"}


@router.get("/me", response_model=UserBase)
async def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.patch("/profile", response_model=UserBase)
async def update_profile(
    payload: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if payload.email is not None and payload.email != current_user.email:
        await ensure_unique_identity(db, current_user.username, payload.email, exclude_id=current_user.id)
        current_user.email = payload.email
    if payload.name is not None:
        current_user.name = payload.name
    if payload.password is not None:
        current_user.password_hash = hash_password(payload.password)
    db.add(current_user)
    await db.commit()
    await db.refresh(current_user)
    return current_user


def _token_response(response: Response, user: User) -> TokenPair:
    access_token, refresh_token = issue_tokens(user.id)
    access_exp, refresh_exp = access_token_ttl(), refresh_token_ttl()
    response.set_cookie(
        "access_token",
        access_token,
        httponly=True,
        secure=False,
        max_age=int(access_exp.total_seconds()),
        samesite="lax",
    )
    response.set_cookie(
        "refresh_token",
        refresh_token,
        httponly=True,
        secure=False,
        max_age=int(refresh_exp.total_seconds()),
        samesite="lax",
    )
    return TokenPair(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=int(access_exp.total_seconds()),
        refresh_expires_in=int(refresh_exp.total_seconds()),
    )
