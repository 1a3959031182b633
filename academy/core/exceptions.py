"""Domain exceptions raised by the fee ledger and progression services.

Every exception carries a machine-readable ``code`` and the HTTP status the
API layer answers with; the message is safe to show to an admin.
"""

from academy.models.enums import ProgressStatus, RejectedReason


class DomainError(Exception):
    code = "domain_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PaymentRejected(DomainError, ValueError):
    """A payment entry failed validation and must not be persisted."""

    def __init__(self, reason: RejectedReason, message: str):
        super().__init__(message)
        self.reason = reason
        self.code = reason.value


class InvalidTransition(DomainError, ValueError):
    """A progress status change is not allowed by the transition table."""
    code = "invalid_transition"

    def __init__(self, current: ProgressStatus, target: ProgressStatus):
        super().__init__(f"Cannot move progress from '{current.value}' to '{target.value}'")
        self.current = current
        self.target = target


class StripeCountOutOfRange(DomainError, ValueError):
    code = "stripe_count_out_of_range"

    def __init__(self, stripe_count: int, max_stripes: int):
        super().__init__(f"Stripe count {stripe_count} must be between 0 and {max_stripes}")
        self.stripe_count = stripe_count
        self.max_stripes = max_stripes


class PromotionUnavailable(DomainError, ValueError):
    """The current belt/level has no successor to promote to."""
    code = "promotion_unavailable"


class RecordNotFound(DomainError, LookupError):
    code = "not_found"
    status_code = 404

    def __init__(self, entity: str, record_id):
        super().__init__(f"{entity} {record_id} not found")
        self.entity = entity
        self.record_id = record_id
