"""Error taxonomy for badgeflow.

Every failure the service and the quickstart script can produce is one
of these types, so callers can decide what to do by ``except`` clause
rather than by inspecting message strings:

  ConfigurationError    - a required key/setting is missing.  Raised
                          BEFORE any network call is attempted.
  IssuanceError         - the inbox call completed but the network
                          rejected it.  Carries the HTTP status.
  NetworkError          - any other LearnCard network call failed.
  SigningError          - the signing authority rejected the credential,
                          or no signing capability exists at all.
  UnexpectedFatalError  - the quickstart script cannot continue.

``ProfileAlreadyExistsNotice`` is NOT a failure.  Creating a profile that
already exists is the normal state on every run after the first, so the
network's "already exists" rejection is reclassified into this notice by
``is_profile_already_exists`` and callers continue.
"""

from __future__ import annotations

import re

_ALREADY_EXISTS = re.compile(
    r"(profile .*already exists|account already exists)", re.IGNORECASE
)


class BadgeflowError(Exception):
    pass


class ConfigurationError(BadgeflowError):
    pass


class IssuanceError(BadgeflowError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NetworkError(BadgeflowError):
    def __init__(
        self, message: str, *, operation: str = "", status_code: int | None = None
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code


class SigningError(BadgeflowError):
    pass


class UnexpectedFatalError(BadgeflowError):
    pass


class ProfileAlreadyExistsNotice(BadgeflowError):
    """The profile is already registered; safe to continue."""

    def __init__(self, profile_id: str) -> None:
        super().__init__(f"Profile {profile_id!r} already exists")
        self.profile_id = profile_id


def is_profile_already_exists(message: str) -> bool:
    """True when a network error message means "this profile exists"."""
    return bool(_ALREADY_EXISTS.search(message or ""))
