"""Persistence for issued refresh tokens.

The store is the source of truth for refresh-token validity. It never commits;
the caller owns the unit of work.
"""
from datetime import datetime
from typing import Optional
from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session
from app.models.refresh_token import RefreshToken


class RefreshTokenStore:
    def __init__(self, db: Session):
        self.db = db

    def create(self, token: str, user_id: str, expires_at: datetime) -> RefreshToken:
        record = RefreshToken(token=token, user_id=user_id, expires_at=expires_at)
        self.db.add(record)
        self.db.flush()
        return record

    def find_by_token(self, token: str) -> Optional[RefreshToken]:
        return self.db.execute(
            select(RefreshToken).where(RefreshToken.token == token)
        ).scalar_one_or_none()

    def delete_by_token(self, token: str) -> int:
        result = self.db.execute(
            delete(RefreshToken)
            .where(RefreshToken.token == token)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    def delete_all_for_user(self, user_id: str) -> int:
        result = self.db.execute(
            delete(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    def consume(self, token: str) -> bool:
        """Delete ``token`` and report whether this call is the one that removed it.

        Two requests racing on the same token can both pass a lookup, but only
        one DELETE can affect the row; the loser sees a row count of zero.
        """
        return self.delete_by_token(token) == 1

    def count_for_user(self, user_id: str) -> int:
        return self.db.execute(
            select(func.count()).select_from(RefreshToken).where(RefreshToken.user_id == user_id)
        ).scalar_one()
