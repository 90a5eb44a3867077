"""Shop-wide settings."""

import logging
from datetime import time

from exledger.database.base import Database
from exledger.domain.access import SUPERVISOR_ROLES, require
from exledger.domain.entities import Actor, SystemSettings
from exledger.domain.errors import ValidationError

logger = logging.getLogger(__name__)


class SettingsService:
    """Service for reading and changing system settings."""

    def __init__(self, db: Database):
        self.db = db

    def get_settings(self) -> SystemSettings:
        return self.db.get_system_settings()

    def day_end(self) -> time:
        settings = self.db.get_system_settings()
        return time(settings.day_end_hour, settings.day_end_minute)

    def set_day_end(self, actor: Actor, hour: int, minute: int = 0) -> None:
        """Change the business day rollover time. Owners and managers only.

        Raises:
            ValidationError: If hour or minute is out of range
        """
        require(actor, actor.role in SUPERVISOR_ROLES, "change settings")
        if not 0 <= hour <= 23:
            raise ValidationError(f"Day end hour must be between 0 and 23, got {hour}")
        if not 0 <= minute <= 59:
            raise ValidationError(f"Day end minute must be between 0 and 59, got {minute}")
        self.db.update_system_settings(hour, minute)
        logger.info("Day end set to %02d:%02d by %s", hour, minute, actor.id)
