"""Exception hierarchy for Site Audit."""

from .base import SiteAuditError
from .config import ConfigurationError, InvalidConfigError
from .pipeline import (
    MissingInputError,
    PersistenceFailure,
    PipelineError,
    ProviderError,
    ProviderExhausted,
    ProviderResponseInvalid,
    RequiredCollectorFailure,
    UnitTimeout,
)
from .request import RateLimitExceeded, ValidationFailure
from .taxonomy import ErrorCode

__all__ = [
    "SiteAuditError",
    "ErrorCode",
    "ConfigurationError",
    "InvalidConfigError",
    "PipelineError",
    "UnitTimeout",
    "RequiredCollectorFailure",
    "MissingInputError",
    "ProviderError",
    "ProviderResponseInvalid",
    "ProviderExhausted",
    "PersistenceFailure",
    "ValidationFailure",
    "RateLimitExceeded",
]
