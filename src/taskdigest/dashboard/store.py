"""Local key-value storage for preferences and run history."""

import json
from pathlib import Path

import structlog
from pydantic import BaseModel, Field, ValidationError

from taskdigest.agent.models import HistoryEntry

logger = structlog.get_logger()

RECIPIENT_EMAIL_KEY = "recipientEmail"
SCHEDULED_TIME_KEY = "scheduledTime"
TASK_HISTORY_KEY = "taskHistory"

# 24-hour HH:MM, ASCII digits only
SCHEDULED_TIME_PATTERN = r"^([01][0-9]|2[0-3]):[0-5][0-9]$"


class LocalStore:
    """String key-value store kept in a single JSON file.

    Every call reads or writes the file synchronously. There is a single
    writer (the dashboard process), so no locking is done.
    """

    def __init__(self, storage_dir: Path | str):
        """Initialize store.

        Args:
            storage_dir: Directory holding local_storage.json
        """
        self.storage_dir = Path(storage_dir)
        self.storage_file = self.storage_dir / "local_storage.json"
        self._ensure_storage_dir()

    def _ensure_storage_dir(self):
        """Ensure storage directory exists."""
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def _load(self) -> dict[str, str]:
        """Load all items from file."""
        if not self.storage_file.exists():
            return {}

        try:
            with open(self.storage_file) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("local_store_unreadable", path=str(self.storage_file), error=str(e))
            return {}

        if not isinstance(data, dict):
            logger.error("local_store_unreadable", path=str(self.storage_file), error="not an object")
            return {}

        return {str(k): str(v) for k, v in data.items()}

    def _save(self, items: dict[str, str]):
        """Save all items to file."""
        with open(self.storage_file, "w") as f:
            json.dump(items, f, indent=2)

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str):
        items = self._load()
        items[key] = value
        self._save(items)

    def remove_item(self, key: str):
        items = self._load()
        if key in items:
            del items[key]
            self._save(items)

    def clear(self):
        self._save({})


class Preferences(BaseModel):
    """The two fields edited in the settings dialog."""

    recipient_email: str = ""
    scheduled_time: str = Field(default="16:30", pattern=SCHEDULED_TIME_PATTERN)


class PreferencesStore:
    """Reads and writes the settings dialog fields."""

    def __init__(self, store: LocalStore, default_scheduled_time: str = "16:30"):
        self.store = store
        self.default_scheduled_time = default_scheduled_time

    def load(self) -> Preferences:
        recipient_email = self.store.get_item(RECIPIENT_EMAIL_KEY) or ""
        scheduled_time = self.store.get_item(SCHEDULED_TIME_KEY) or self.default_scheduled_time
        try:
            return Preferences(recipient_email=recipient_email, scheduled_time=scheduled_time)
        except ValidationError:
            logger.warning("stored_scheduled_time_invalid", scheduled_time=scheduled_time)
            return Preferences(
                recipient_email=recipient_email, scheduled_time=self.default_scheduled_time
            )

    def save(self, preferences: Preferences):
        self.store.set_item(RECIPIENT_EMAIL_KEY, preferences.recipient_email)
        self.store.set_item(SCHEDULED_TIME_KEY, preferences.scheduled_time)
        logger.info("preferences_saved", scheduled_time=preferences.scheduled_time)


class HistoryStore:
    """Rolling list of past runs, newest first."""

    def __init__(self, store: LocalStore, limit: int = 30):
        self.store = store
        self.limit = limit

    def load(self) -> list[HistoryEntry]:
        """Load stored history.

        Malformed entries are skipped; the rest are kept.

        Returns:
            Stored entries, or an empty list if nothing valid is stored
        """
        raw = self.store.get_item(TASK_HISTORY_KEY)
        if not raw:
            return []

        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.error("history_load_failed", error=str(e))
            return []

        if not isinstance(data, list):
            logger.error("history_load_failed", error="history is not a list")
            return []

        entries = []
        for item in data:
            try:
                entries.append(HistoryEntry.model_validate(item))
            except ValidationError as e:
                logger.warning("history_entry_dropped", error=str(e))
        return entries

    def save(self, entries: list[HistoryEntry]):
        """Persist entries, keeping only the newest `limit`."""
        entries = entries[: self.limit]
        encoded = json.dumps([entry.model_dump(by_alias=True) for entry in entries])
        self.store.set_item(TASK_HISTORY_KEY, encoded)
