"""Import wizard orchestrating upload, mapping and execution."""

from .models import (
    WizardStep,
    NotificationVariant,
    Notification,
    ImportTarget,
    SessionState,
    WizardSnapshot,
)
from .orchestrator import ImportWizard

__all__ = [
    "WizardStep",
    "NotificationVariant",
    "Notification",
    "ImportTarget",
    "SessionState",
    "WizardSnapshot",
    "ImportWizard",
]
