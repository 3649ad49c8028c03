"""Service for reading and updating rate settings."""

import logging
from datetime import UTC, datetime
from typing import Any

from botocore.exceptions import ClientError

from checkout_pricing_service.models.settings_models import RateSettings
from checkout_pricing_service.repositories.pricing_repositories import RateSettingsRepository

logger = logging.getLogger(__name__)


class SettingsService:
    """Service for the admin-editable rate settings.

    Reads never fail: when nothing is stored, or storage is unavailable, the
    default rates are returned so checkout can still price orders.
    """

    def __init__(self, settings_repository: RateSettingsRepository) -> None:
        """Initialize the SettingsService.

        Args:
            settings_repository: Repository holding the settings item
        """
        self.settings_repository = settings_repository

    async def get_settings(self) -> RateSettings:
        """Return the current settings, falling back to defaults."""
        settings = self.settings_repository.get_settings()
        if settings is None:
            logger.warning("No rate settings stored, using defaults")
            return RateSettings()
        return settings

    async def update_settings(self, changes: dict[str, Any]) -> RateSettings | None:
        """Apply a partial update to the settings.

        Orders already priced are unaffected; they carry their own snapshot.

        Args:
            changes: Field names and new values

        Returns:
            The updated settings, or None if the stored settings could not be
            read or the update could not be saved

        Raises:
            pydantic.ValidationError: If a field is unknown or a value is invalid
        """
        try:
            current = self.settings_repository.read_settings() or RateSettings()
        except ClientError as e:
            # A failed read must not fall back to defaults here
            logger.error(f"Failed to read rate settings, update aborted: {e}")
            return None

        data = current.model_dump(exclude={"updated_at"})
        data.update(changes)
        data["updated_at"] = datetime.now(UTC)

        updated = RateSettings.model_validate(data)

        if not self.settings_repository.save_settings(updated):
            return None

        logger.info(f"Rate settings updated: {sorted(changes)}")
        return updated
