"""Repository for UserSettings database operations."""

import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from accountabot.models.user_settings import UserSettings
from accountabot.database.models import UserSettingsDB

logger = logging.getLogger(__name__)


class UserSettingsRepository:
    """Repository for UserSettings database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _commit(self, settings_db: UserSettingsDB, action: str) -> UserSettings:
        try:
            self.db.commit()
            self.db.refresh(settings_db)
            logger.debug(f"{action} settings for user {settings_db.user_id}")
            return settings_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to save settings for user {settings_db.user_id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, user_id: str) -> Optional[UserSettings]:
        """Get settings by user ID."""
        settings_db = self.db.query(UserSettingsDB).filter(UserSettingsDB.user_id == user_id).first()
        return settings_db.to_pydantic() if settings_db else None

    def get_by_chat_id(self, chat_id: str) -> Optional[UserSettings]:
        """Get the settings of the user linked to a Telegram chat."""
        settings_db = self.db.query(UserSettingsDB).filter(UserSettingsDB.telegram_chat_id == str(chat_id)).first()
        return settings_db.to_pydantic() if settings_db else None

    def get_or_create(self, user_id: str, now: Optional[datetime] = None) -> UserSettings:
        """Get settings, creating the default row on first access."""
        existing = self.get(user_id)
        if existing:
            return existing
        now = now or datetime.now()
        settings_db = UserSettingsDB.from_pydantic(UserSettings(user_id=user_id, created_at=now, updated_at=now))
        self.db.add(settings_db)
        return self._commit(settings_db, "Created")

    def list_with_delivery_target(self) -> List[UserSettings]:
        """All users with a linked chat."""
        rows = self.db.query(UserSettingsDB).filter(
            UserSettingsDB.telegram_chat_id.isnot(None),
            UserSettingsDB.telegram_chat_id != "",
        ).order_by(UserSettingsDB.user_id).all()
        return [row.to_pydantic() for row in rows]

    def update(self, settings: UserSettings) -> UserSettings:
        """Update existing settings."""
        settings_db = self.db.query(UserSettingsDB).filter(UserSettingsDB.user_id == settings.user_id).first()
        if not settings_db:
            raise ValueError(f"Settings for user {settings.user_id} not found")
        settings_db.apply_pydantic(settings)
        return self._commit(settings_db, "Updated")

    def link_chat(self, user_id: str, chat_id: str, now: Optional[datetime] = None) -> UserSettings:
        """Link a chat to a user (upsert by user).

        A chat belongs to at most one user; any previous owner is unlinked.
        """
        now = now or datetime.now()
        chat_id = str(chat_id)
        try:
            self.db.query(UserSettingsDB).filter(
                UserSettingsDB.telegram_chat_id == chat_id,
                UserSettingsDB.user_id != user_id,
            ).update({"telegram_chat_id": None, "updated_at": now}, synchronize_session=False)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to unlink chat {chat_id}: {type(e).__name__}: {str(e)}")
            raise

        settings_db = self.db.query(UserSettingsDB).filter(UserSettingsDB.user_id == user_id).first()
        if settings_db:
            settings_db.telegram_chat_id = chat_id
            settings_db.updated_at = now
        else:
            settings_db = UserSettingsDB.from_pydantic(
                UserSettings(user_id=user_id, telegram_chat_id=chat_id, created_at=now, updated_at=now)
            )
            self.db.add(settings_db)
        return self._commit(settings_db, "Linked chat in")

    def unlink_chat(self, chat_id: str, now: Optional[datetime] = None) -> bool:
        """Remove a chat link. Returns False if no user was linked to it."""
        settings_db = self.db.query(UserSettingsDB).filter(UserSettingsDB.telegram_chat_id == str(chat_id)).first()
        if not settings_db:
            return False
        settings_db.telegram_chat_id = None
        settings_db.updated_at = now or datetime.now()
        self._commit(settings_db, "Unlinked chat in")
        return True
