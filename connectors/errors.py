"""
Installer exceptions.

Every failure in the install handshake is an ``InstallError`` subclass.
``kind`` is the stable category (used in outcomes and tests), ``message``
is the user-facing text, ``detail`` carries diagnostics such as the raw
Slack response body.
"""

from __future__ import annotations

from typing import Optional


class InstallError(Exception):
    kind = "install_error"
    status_code = 400
    default_message = "Installation failed."

    def __init__(self, message: Optional[str] = None, *, detail: Optional[str] = None) -> None:
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class ConfigurationError(InstallError):
    kind = "configuration"
    status_code = 500
    default_message = "The Slack app is not configured."


# ── State token ────────────────────────────────────────────────────────


class StateTokenError(InstallError):
    """The ``state`` parameter failed verification."""


class MalformedStateError(StateTokenError):
    kind = "malformed_state"
    default_message = "Invalid request."


class InvalidSignatureError(StateTokenError):
    kind = "invalid_signature"
    default_message = "Invalid signature."


class ExpiredStateError(StateTokenError):
    kind = "expired_state"
    default_message = "Expired signature."


# ── Callback parameters ────────────────────────────────────────────────


class PermissionDeniedError(InstallError):
    kind = "permission_denied"
    status_code = 403
    default_message = "Permissions not accepted."

    def __init__(self, error_code: str = "access_denied") -> None:
        self.error_code = error_code
        message = None if error_code == "access_denied" else f"Slack returned an error: {error_code}."
        super().__init__(message)


class MissingCodeError(InstallError):
    kind = "invalid_request"
    default_message = "Invalid request."


# ── Code exchange ──────────────────────────────────────────────────────


class ExchangeError(InstallError):
    kind = "exchange"
    status_code = 502
    default_message = "Error retrieving access token from Slack."


class SlackTransportError(ExchangeError):
    kind = "transport"


class SlackApiError(ExchangeError):
    kind = "api_error"

    def __init__(self, body: str) -> None:
        self.body = body
        super().__init__(
            f"Error retrieving access token from Slack: {body}",
            detail=body,
        )


class SlackParseError(ExchangeError):
    kind = "parse"


# ── Persistence ────────────────────────────────────────────────────────


class InstallationStoreError(InstallError):
    kind = "store"
    status_code = 500
    default_message = "Could not save the installation."
