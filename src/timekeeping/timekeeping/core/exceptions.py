class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist (data integrity violation)."""


class DuplicateEventError(DomainError):
    """Raised when a ledger row was already materialized as an attendance event."""

    def __init__(self, ledger_sequence_id: int):
        super().__init__(f"Ledger sequence {ledger_sequence_id} already materialized")
        self.ledger_sequence_id = ledger_sequence_id
