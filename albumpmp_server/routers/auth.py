# Copyright (C) 2026 Album PMP Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Authentication API routes."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from albumpmp_server.auth import create_access_token, get_current_user
from albumpmp_server.database import get_db
from albumpmp_server.models import User
from albumpmp_server.api.schemas import GuestLogin, Token, UserResponse
from albumpmp_server.rate_limit import rate_limit_dep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


async def _find_user(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


@router.post("/guest", response_model=Token, dependencies=[Depends(rate_limit_dep)])
async def guest_login(
    data: GuestLogin,
    db: AsyncSession = Depends(get_db),
) -> Token:
    """
    Sign in with a display name only. A known name resumes that user,
    keeping their album and ratings; a new name creates a user.
    """
    user = await _find_user(db, data.username)
    if user:
        user.last_login_at = datetime.now(timezone.utc)
        await db.commit()
    else:
        user = User(username=data.username, last_login_at=datetime.now(timezone.utc))
        db.add(user)
        try:
            await db.commit()
            logger.info("New guest user %r", data.username)
        except IntegrityError:
            # Another request registered the same name first; resume that user
            await db.rollback()
            user = await _find_user(db, data.username)
            if not user:
                raise
            user.last_login_at = datetime.now(timezone.utc)
            await db.commit()
    await db.refresh(user)
    token = create_access_token({"sub": str(user.id)})
    return Token(access_token=token)


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)) -> UserResponse:
    """Current user."""
    return UserResponse.model_validate(user)
