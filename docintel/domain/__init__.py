from docintel.domain.errors import (
    ContentPersistenceFailed,
    DocError,
    DocumentNotFound,
    PromotionFailed,
    StageTimeout,
    TextExtractionFailed,
)
from docintel.domain.state_machine import InvalidTransitionError, StateMachine
from docintel.domain.states import ClauseType, DocumentType, ProcessingStatus, ReviewStatus

__all__ = [
    "DocError",
    "ContentPersistenceFailed",
    "DocumentNotFound",
    "TextExtractionFailed",
    "PromotionFailed",
    "StageTimeout",
    "InvalidTransitionError",
    "StateMachine",
    "ClauseType",
    "DocumentType",
    "ProcessingStatus",
    "ReviewStatus",
]
