# This project was developed with assistance from AI tools.
"""Domain exceptions raised by services and mapped to HTTP status by routes.

``None`` returns (not exceptions) signal a missing or out-of-scope record.
"""


class PermissionDeniedError(Exception):
    """The caller can see the record but may not perform this action (403)."""


class InvalidTransitionError(ValueError):
    """A status change not allowed by the relevant state machine (409)."""


class DomainValidationError(ValueError):
    """Input that is well-formed but violates a business rule (422)."""


def transition_message(current, target, allowed) -> str:
    """Human-readable reason for a rejected transition."""
    allowed_text = sorted(s.value for s in allowed) if allowed else "none (terminal status)"
    return f"Cannot transition from '{current.value}' to '{target.value}'. Allowed: {allowed_text}."


class DuplicateFundingRequestError(ValueError):
    """The investor already has a funding request on this deal (409)."""
