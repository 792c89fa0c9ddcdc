"""
KYC error taxonomy.

OCR failures (EnvironmentUnavailable, RecognitionFailed) are always
recovered by the scan orchestrator. Field validation failures are not
exceptions at all: the field simply stays empty.
"""


class KYCError(Exception):
    """Base class for every error raised by the KYC core."""


class EnvironmentUnavailable(KYCError):
    """OCR is not supported in the current runtime (library/model missing)."""


class RecognitionFailed(KYCError):
    """OCR ran but produced unusable or no text."""


class SubmissionRejected(KYCError):
    """Blocking submit-time validation failure, names the unmet requirement."""

    def __init__(self, requirement: str, message: str):
        super().__init__(message)
        self.requirement = requirement
        self.message = message


class PersistenceError(KYCError):
    """Persistence service failed while storing or reading documents."""


class InvalidStatusTransition(KYCError):
    """Requested document status change is not allowed."""

    def __init__(self, current, target):
        super().__init__(f"Cannot move document from '{current.value}' to '{target.value}'")
        self.current = current
        self.target = target


class ScanInProgress(KYCError):
    """A new capture was started while another scan is still running."""


class DocumentLocked(KYCError):
    """Document is pending review or already verified; re-upload is refused."""

    def __init__(self, doc_type, status):
        super().__init__(
            f"{doc_type.value} is {status.value}; upload and OCR are disabled"
        )
        self.doc_type = doc_type
        self.status = status


class UnknownDocumentType(KYCError):
    """No extractor is registered for the requested document type."""


class DocumentNotFound(KYCError):
    """No submitted document with the given id."""
