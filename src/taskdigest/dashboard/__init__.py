"""Dashboard state, storage and web interface."""

from taskdigest.dashboard.controller import DashboardController, create_controller
from taskdigest.dashboard.store import (
    HistoryStore,
    LocalStore,
    Preferences,
    PreferencesStore,
)
from taskdigest.dashboard.web import DashboardWebServer

__all__ = [
    "DashboardController",
    "DashboardWebServer",
    "HistoryStore",
    "LocalStore",
    "Preferences",
    "PreferencesStore",
    "create_controller",
]
