class DomainError(Exception):
    """Base error of the core. Every error carries a kind and a human-readable message."""

    kind = "domain_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidReference(DomainError):
    kind = "invalid_reference"


class InvalidPipelineInput(DomainError):
    kind = "invalid_pipeline_input"


class NotFound(DomainError):
    kind = "not_found"


class Forbidden(DomainError):
    kind = "forbidden"


class Conflict(DomainError):
    kind = "conflict"


class UnsupportedTargetKind(DomainError):
    kind = "unsupported_target_kind"


class StoreUnavailable(DomainError):
    kind = "store_unavailable"
