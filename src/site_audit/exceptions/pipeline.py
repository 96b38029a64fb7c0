"""Pipeline exceptions: collector, analyser, provider and storage failures."""

from typing import List, Optional, Sequence, Tuple

from .base import SiteAuditError
from .taxonomy import ErrorCode


class PipelineError(SiteAuditError):
    """Base class for failures raised inside the audit pipeline."""

    pass


class UnitTimeout(PipelineError):
    """A single collector or analyser exceeded its allotted time."""

    def __init__(self, unit: str, timeout_seconds: float):
        super().__init__(f"{unit} timed out after {timeout_seconds:g}s")
        self.unit = unit
        self.timeout_seconds = timeout_seconds


class RequiredCollectorFailure(PipelineError):
    """One or more required collectors failed; the job cannot continue.

    ``failures`` holds ``(collector_name, message)`` for every failed required
    collector, not only the first.
    """

    code = ErrorCode.AU502

    def __init__(self, failures: Sequence[Tuple[str, str]]):
        self.failures: List[Tuple[str, str]] = list(failures)
        summary = "; ".join(f"{name}: {message}" for name, message in self.failures)
        super().__init__(f"Required collectors failed: {summary}")

    @property
    def failed_collectors(self) -> List[str]:
        return [name for name, _ in self.failures]


class MissingInputError(PipelineError):
    """An analyser's required bundle field is null."""

    def __init__(self, analyser: str, fields: Sequence[str]):
        super().__init__(
            f"{analyser} requires data that was not collected: {', '.join(fields)}",
            details={"analyser": analyser},
        )
        self.analyser = analyser
        self.fields = list(fields)


class ProviderError(PipelineError):
    """Transport, HTTP or configuration failure of an external provider call."""

    def __init__(self, provider: str, reason: str, status_code: Optional[int] = None):
        details = {"provider": provider}
        if status_code is not None:
            details["status"] = str(status_code)
        super().__init__(f"{provider} call failed: {reason}", details=details)
        self.provider = provider
        self.reason = reason
        self.status_code = status_code


class ProviderResponseInvalid(ProviderError):
    """The provider answered, but the payload did not match the expected schema."""

    def __init__(self, provider: str, reason: str):
        super().__init__(provider, f"invalid structured response: {reason}")


class ProviderExhausted(PipelineError):
    """Every attempt in a fallback chain failed."""

    def __init__(self, label: str, errors: Sequence[Tuple[str, BaseException]]):
        self.label = label
        self.errors: List[Tuple[str, BaseException]] = list(errors)
        tried = "; ".join(f"{name}: {err}" for name, err in self.errors) or "no attempts"
        super().__init__(f"All providers failed for {label} ({tried})")


class PersistenceFailure(PipelineError):
    """A report or history write failed. Always swallowed by the driver."""

    def __init__(self, target: str, reason: str):
        super().__init__(f"Failed to persist {target}", details={"reason": reason})
        self.target = target
        self.reason = reason
