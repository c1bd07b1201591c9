from __future__ import annotations

from dataclasses import dataclass

from docintel.config import Settings, settings as default_settings
from docintel.pipeline.classifier import ClauseClassification


@dataclass(frozen=True)
class ConfidencePolicy:
    """Weights and review threshold used to fuse clause confidence."""

    actor_boost: float = 0.1
    deadline_boost: float = 0.1
    dependency_boost: float = 0.05
    ambiguity_penalty: float = 0.2
    review_threshold: float = 0.8

    @classmethod
    def from_settings(cls, cfg: Settings | None = None) -> "ConfidencePolicy":
        cfg = cfg or default_settings
        return cls(
            actor_boost=cfg.actor_boost,
            deadline_boost=cfg.deadline_boost,
            dependency_boost=cfg.dependency_boost,
            ambiguity_penalty=cfg.ambiguity_penalty,
            review_threshold=cfg.clause_review_threshold,
        )


def fuse_confidence(
    classification: ClauseClassification,
    has_actors: bool,
    has_deadlines: bool,
    has_dependencies: bool,
    has_ambiguities: bool,
    policy: ConfidencePolicy | None = None,
) -> float:
    p = policy or ConfidencePolicy()
    score = classification.confidence
    if has_actors:
        score += max(0.0, p.actor_boost)
    if has_deadlines:
        score += max(0.0, p.deadline_boost)
    if has_dependencies:
        score += max(0.0, p.dependency_boost)
    if has_ambiguities:
        score -= max(0.0, p.ambiguity_penalty)
    return round(max(0.0, min(1.0, score)), 3)


def clause_requires_review(score: float, has_ambiguities: bool, policy: ConfidencePolicy | None = None) -> bool:
    # Ambiguity forces review whatever the numeric score.
    p = policy or ConfidencePolicy()
    return score < p.review_threshold or has_ambiguities
