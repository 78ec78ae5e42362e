"""
Error types raised while generating client documents.

Only NoEligiblePeriod is meant to reach a single-document caller as a hard
failure. Everything else is recovered close to where it happens: template
problems fall back to freehand drawing, a missing signature image just
leaves the signature line empty, and batch runs record the failure per
subject and move on.
"""

from typing import Optional


class DocumentGenerationError(Exception):
    """Base class for all document generation errors."""


class TemplateLoadFailed(DocumentGenerationError):
    """The fillable template could not be loaded or has no form."""

    MISSING = "missing"
    UNREADABLE = "unreadable"
    NO_FORM = "no_form"

    def __init__(self, template_name: str, reason: str, detail: str = ""):
        self.template_name = template_name
        self.reason = reason
        self.detail = detail
        message = f"Template '{template_name}' unavailable ({reason})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class TemplateFieldSkipped(DocumentGenerationError):
    """A single named form field could not be set."""

    def __init__(self, field_name: str, detail: str):
        self.field_name = field_name
        self.detail = detail
        super().__init__(f"Field '{field_name}' skipped: {detail}")


class NoEligiblePeriod(DocumentGenerationError):
    """Registration-date truncation left no month to report on."""

    def __init__(self, subject_name: str, registration_label: Optional[str] = None):
        self.subject_name = subject_name
        self.registration_label = registration_label
        message = f"No eligible period for '{subject_name}'"
        if registration_label:
            message = f"{message} (opened in {registration_label})"
        super().__init__(message)


class SignatureAssetUnavailable(DocumentGenerationError):
    """The signer's signature image could not be fetched or decoded."""

    def __init__(self, source: str, detail: str):
        self.source = source
        self.detail = detail
        super().__init__(f"Signature image unavailable from {source}: {detail}")


class SubjectGenerationFailed(DocumentGenerationError):
    """Wraps any unexpected error raised while generating one subject."""

    def __init__(self, subject_name: str, cause: BaseException):
        self.subject_name = subject_name
        self.cause = cause
        super().__init__(f"Generation failed for '{subject_name}': {cause}")
