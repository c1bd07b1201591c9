from __future__ import annotations


class DocError(RuntimeError):
    """Base class for document pipeline failures."""


class ContentPersistenceFailed(DocError):
    pass


class DocumentNotFound(DocError, LookupError):
    def __init__(self, document_id: str) -> None:
        super().__init__(f"Document not found: {document_id}")
        self.document_id = document_id


class TextExtractionFailed(DocError):
    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class PromotionFailed(DocError):
    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class StageTimeout(DocError):
    def __init__(self, stage: str, seconds: float) -> None:
        super().__init__(f"Stage '{stage}' timed out after {seconds:g}s")
        self.stage = stage
        self.seconds = seconds
