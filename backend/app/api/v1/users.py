"""
Users API – staff directory and account administration.
"""
import uuid

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import or_, select

from app.api.deps import DB, CurrentUser, ManagerUser, ROLE_MANAGER
from app.models.user import User
from app.schemas.user import UserOut, UserUpdate, ProfileUpdate
from app.utils.positions import is_valid_position

router = APIRouter(prefix="/users", tags=["users"])


async def _get_user_or_404(user_id: uuid.UUID, db) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


async def _ensure_unique(db, user: User, username: str, email: str) -> None:
    result = await db.execute(
        select(User.id).where(
            or_(User.username == username, User.email == email),
            User.id != user.id,
        )
    )
    if result.first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username or email already in use")


@router.get("", response_model=list[UserOut])
async def list_users(
    current_user: ManagerUser,
    db: DB,
    position: str | None = Query(None),
    include_inactive: bool = Query(False),
):
    """All users, optionally only those who can work a given position."""
    if position is not None and not is_valid_position(position):
        raise HTTPException(status_code=400, detail=f"Unknown position: {position}")

    query = select(User).order_by(User.last_name, User.first_name, User.username)
    if not include_inactive:
        query = query.where(User.is_active == True)  # noqa: E712
    users = (await db.execute(query)).scalars().all()

    # positions is a JSON column, filtered in Python
    if position:
        users = [u for u in users if position in (u.positions or [])]
    return users


@router.get("/{user_id}", response_model=UserOut)
async def get_user(user_id: uuid.UUID, current_user: CurrentUser, db: DB):
    if current_user.role != ROLE_MANAGER and current_user.id != user_id:
        raise HTTPException(status_code=403, detail="Not allowed to view this user")
    return await _get_user_or_404(user_id, db)


@router.put("/{user_id}", response_model=UserOut)
async def update_user(user_id: uuid.UUID, payload: UserUpdate, current_user: ManagerUser, db: DB):
    """Manager update of any account, including role and hourly rate."""
    user = await _get_user_or_404(user_id, db)
    await _ensure_unique(db, user, payload.username, payload.email)

    if user.id == current_user.id and payload.role != ROLE_MANAGER:
        raise HTTPException(status_code=400, detail="You cannot remove your own manager role")
    if user.id == current_user.id and payload.is_active is False:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")

    for field, value in payload.model_dump(exclude_unset=True).items():
        if field in ("is_active", "positions") and value is None:
            continue
        setattr(user, field, value)

    await db.commit()
    await db.refresh(user)
    return user


@router.put("/{user_id}/profile", response_model=UserOut)
async def update_profile(user_id: uuid.UUID, payload: ProfileUpdate, current_user: CurrentUser, db: DB):
    """Personal data only; role, rate and activation stay untouched."""
    if current_user.role != ROLE_MANAGER and current_user.id != user_id:
        raise HTTPException(status_code=403, detail="You can only edit your own profile")

    user = await _get_user_or_404(user_id, db)
    await _ensure_unique(db, user, payload.username, payload.email)

    for field, value in payload.model_dump(exclude_unset=True).items():
        if field == "positions" and value is None:
            continue
        setattr(user, field, value)

    await db.commit()
    await db.refresh(user)
    return user
