from docintel.infra.content_store import LocalContentStore, sha256_bytes
from docintel.infra.repositories import (
    DocumentRepository,
    InMemoryRepository,
    RepositoryError,
    SupabaseRepository,
    build_repository,
)
from docintel.infra.risk_register import (
    HTTPRiskRegister,
    InMemoryRiskRegister,
    RiskRegister,
    RiskRegisterError,
    build_risk_register,
)
from docintel.infra.text_extractor import DocumentTextExtractor, TextExtractor

__all__ = [
    "LocalContentStore",
    "sha256_bytes",
    "DocumentRepository",
    "InMemoryRepository",
    "RepositoryError",
    "SupabaseRepository",
    "build_repository",
    "HTTPRiskRegister",
    "InMemoryRiskRegister",
    "RiskRegister",
    "RiskRegisterError",
    "build_risk_register",
    "DocumentTextExtractor",
    "TextExtractor",
]
