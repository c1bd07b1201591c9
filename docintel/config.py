from __future__ import annotations

import os
import re
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


def _get_config_value(*keys: str, default: str = "") -> str:
    for key in keys:
        value = os.getenv(key, "").strip()
        if value:
            return value
    return default


def _get_float(key: str, default: float) -> float:
    raw = _get_config_value(key)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_int(key: str, default: int) -> int:
    raw = _get_config_value(key)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    app_env: str = "dev"
    log_level: str = "INFO"
    upload_dir: str = "./uploads/documents"
    persistence_backend: str = "memory"
    supabase_url: str = ""
    supabase_key: str = ""
    risk_register_base_url: str = ""
    risk_register_token: str = ""
    text_extraction_timeout_seconds: float = 30.0
    risk_register_timeout_seconds: float = 10.0
    max_pdf_pages: int = 0
    # Policy constants. Tuned through the environment, never inline.
    min_sentence_length: int = 20
    min_clause_length: int = 30
    clause_review_threshold: float = 0.8
    risk_review_threshold: float = 0.8
    promotion_min_confidence: float = 0.7
    actor_boost: float = 0.1
    deadline_boost: float = 0.1
    dependency_boost: float = 0.05
    ambiguity_penalty: float = 0.2
    default_owner_role: str = "Risk Manager"
    risk_pattern_confidences: str = ""

    def supabase_url_valid(self) -> bool:
        # Must be project URL, not postgres DSN.
        return bool(re.match(r"^https://[a-z0-9-]+\.supabase\.co$", self.supabase_url))

    def supabase_key_present(self) -> bool:
        return bool(self.supabase_key)


def load_settings() -> Settings:
    return Settings(
        app_env=_get_config_value("APP_ENV", default="dev"),
        log_level=_get_config_value("LOG_LEVEL", default="INFO").upper(),
        upload_dir=_get_config_value("DOCUMENT_UPLOAD_DIR", default="./uploads/documents"),
        persistence_backend=_get_config_value("PERSISTENCE_BACKEND", default="memory").lower(),
        supabase_url=_get_config_value("SUPABASE_URL").rstrip("/"),
        supabase_key=_get_config_value("SUPABASE_SERVICE_KEY", "SUPABASE_SERVICE_ROLE_KEY", "SUPABASE_KEY"),
        risk_register_base_url=_get_config_value("RISK_REGISTER_BASE_URL").rstrip("/"),
        risk_register_token=_get_config_value("RISK_REGISTER_TOKEN"),
        text_extraction_timeout_seconds=_get_float("TEXT_EXTRACTION_TIMEOUT_SECONDS", 30.0),
        risk_register_timeout_seconds=_get_float("RISK_REGISTER_TIMEOUT_SECONDS", 10.0),
        max_pdf_pages=_get_int("MAX_PDF_PAGES", 0),
        min_sentence_length=_get_int("MIN_SENTENCE_LENGTH", 20),
        min_clause_length=_get_int("MIN_CLAUSE_LENGTH", 30),
        clause_review_threshold=_get_float("CLAUSE_REVIEW_THRESHOLD", 0.8),
        risk_review_threshold=_get_float("RISK_REVIEW_THRESHOLD", 0.8),
        promotion_min_confidence=_get_float("PROMOTION_MIN_CONFIDENCE", 0.7),
        actor_boost=_get_float("CONFIDENCE_ACTOR_BOOST", 0.1),
        deadline_boost=_get_float("CONFIDENCE_DEADLINE_BOOST", 0.1),
        dependency_boost=_get_float("CONFIDENCE_DEPENDENCY_BOOST", 0.05),
        ambiguity_penalty=_get_float("CONFIDENCE_AMBIGUITY_PENALTY", 0.2),
        default_owner_role=_get_config_value("DEFAULT_OWNER_ROLE", default="Risk Manager"),
        risk_pattern_confidences=_get_config_value("RISK_PATTERN_CONFIDENCES"),
    )


settings = load_settings()
