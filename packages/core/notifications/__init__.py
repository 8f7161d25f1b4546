from .email import (
    ConfigurationError,
    EmailResult,
    ResendEmailClient,
    email_client_from_env,
    render_reminder_email,
)
from .in_app import FixedPermission, InAppNotifier, SessionAlert

__all__ = [
    "ConfigurationError",
    "EmailResult",
    "FixedPermission",
    "InAppNotifier",
    "ResendEmailClient",
    "SessionAlert",
    "email_client_from_env",
    "render_reminder_email",
]
