"""Error taxonomy for the commit -> post pipeline.

Every error carries a message that is safe to show to the user as-is.
"""

from enum import Enum


class HeraldError(Exception):
    """Base exception for all user-facing pipeline errors."""

    @property
    def message(self) -> str:
        return str(self)


class NotFoundError(HeraldError):
    """Repository or resource does not exist."""


class AuthFailedError(HeraldError):
    """Credential rejected by a provider."""


class QuotaExceededError(HeraldError):
    """Provider-side usage limit reached."""


class FetchFailedError(HeraldError):
    """Generic failure talking to the source hosting provider."""


class ProviderFailedError(HeraldError):
    """Generic failure talking to the text-completion provider."""


class ValidationError(HeraldError):
    """Bad user input. Raised before any external call, state is untouched."""


class PublishErrorKind(str, Enum):
    CREDITS_DEPLETED = "credits_depleted"
    INSUFFICIENT_PERMISSIONS = "insufficient_permissions"
    AUTH_FAILED = "auth_failed"
    FAILED = "failed"


_PUBLISH_MESSAGES = {
    PublishErrorKind.CREDITS_DEPLETED: (
        "Your X account does not have credits available. Check the Billing/Usage "
        "section of the X developer portal and make sure the app is enrolled in a tier "
        "that allows posting."
    ),
    PublishErrorKind.INSUFFICIENT_PERMISSIONS: (
        "Your app does not have write permissions. Set the app permissions to "
        "\"Read and write\" in the X developer portal and regenerate the access tokens."
    ),
    PublishErrorKind.AUTH_FAILED: "X API authentication failed. Please check your API credentials.",
    PublishErrorKind.FAILED: "Failed to post to X.",
}


class PublishError(HeraldError):
    """Raised when the posting provider rejects a post.

    Attributes:
        kind: Which failure class the provider signalled
    """

    def __init__(self, kind: PublishErrorKind, detail: str | None = None):
        message = _PUBLISH_MESSAGES[kind]
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.kind = kind
