"""
Error taxonomy shared by the gateways and services.

Routes let these propagate; ``rentflow.main`` maps them to JSON responses.
"""
from typing import Optional


class RentFlowError(Exception):
    status_code = 500

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ConfigurationError(RentFlowError):
    """A gateway credential or setting is missing."""
    status_code = 503


class RecordValidationError(RentFlowError):
    """Input rejected before any write."""
    status_code = 400


class DuplicateRecordError(RecordValidationError):
    status_code = 409


class RecordNotFoundError(RentFlowError):
    status_code = 404


class GatewayError(RentFlowError):
    """The remote store, storage bucket or auth service reported a failure."""
    status_code = 502
