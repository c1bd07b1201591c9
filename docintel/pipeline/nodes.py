from __future__ import annotations

from datetime import date
from typing import Any

from docintel.config import Settings, settings as default_settings
from docintel.domain.models import ComplianceObligation, ExtractedClause, ExtractedRisk
from docintel.domain.states import ClauseType
from docintel.pipeline.classifier import classify_clause
from docintel.pipeline.confidence import ConfidencePolicy, clause_requires_review, fuse_confidence
from docintel.pipeline.dag import Stage, StageGraph
from docintel.pipeline.risk_patterns import build_risk_patterns, match_risk_indicators
from docintel.pipeline.segmenter import is_clause_candidate, segment
from docintel.pipeline.signals import detect_ambiguity, extract_actors, extract_deadlines, extract_dependencies

CLAUSE_TEXT_MAX_LENGTH = 500


class PipelineNodes:
    """Stage functions for the text -> structured results graph.

    Nothing here touches storage; every node reads the shared context and
    returns a fresh output dict.
    """

    def __init__(self, cfg: Settings | None = None) -> None:
        self.cfg = cfg or default_settings
        self.policy = ConfidencePolicy.from_settings(self.cfg)
        self.risk_patterns = build_risk_patterns(self.cfg.risk_pattern_confidences)

    def segmentation(self, ctx: dict[str, Any]) -> dict[str, Any]:
        units = segment(str(ctx.get("text") or ""), min_length=self.cfg.min_sentence_length)
        return {"units": units}

    def clause_analysis(self, ctx: dict[str, Any]) -> dict[str, Any]:
        document_id = str(ctx["document_id"])
        base_date: date | None = ctx.get("base_date")
        clauses: list[ExtractedClause] = []
        obligations: list[ComplianceObligation] = []

        for unit in ctx["segmentation"]["units"]:
            classification = classify_clause(unit)
            if not classification.is_clause or not is_clause_candidate(unit, self.cfg.min_clause_length):
                continue

            actors = extract_actors(unit)
            deadlines = extract_deadlines(unit, base_date=base_date)
            dependencies = extract_dependencies(unit)
            ambiguities = detect_ambiguity(unit)

            score = fuse_confidence(
                classification,
                bool(actors),
                bool(deadlines),
                bool(dependencies),
                bool(ambiguities),
                policy=self.policy,
            )
            clause = ExtractedClause(
                document_id=document_id,
                clause_text=unit[:CLAUSE_TEXT_MAX_LENGTH],
                clause_number=str(len(clauses) + 1),
                clause_type=classification.type,
                confidence_score=score,
                requires_review=clause_requires_review(score, bool(ambiguities), policy=self.policy),
                actors=actors,
                deadlines=deadlines,
                dependencies=dependencies,
                ambiguities=ambiguities,
            )
            clauses.append(clause)

            if classification.type is ClauseType.OBLIGATION and actors:
                owner = actors[0]
                first_deadline = deadlines[0].deadline if deadlines else None
                obligations.append(
                    ComplianceObligation(
                        document_id=document_id,
                        clause_id=clause.id,
                        obligation_text=unit[:CLAUSE_TEXT_MAX_LENGTH],
                        extracted_action=owner.action,
                        deadline_date=first_deadline.isoformat() if first_deadline else None,
                        owner_role=owner.role or self.cfg.default_owner_role,
                    )
                )

        return {"clauses": clauses, "obligations": obligations}

    def risk_matching(self, ctx: dict[str, Any]) -> dict[str, Any]:
        risks: list[ExtractedRisk] = []
        for unit in ctx["segmentation"]["units"]:
            risk = match_risk_indicators(
                unit,
                patterns=self.risk_patterns,
                review_threshold=self.cfg.risk_review_threshold,
            )
            if risk is not None:
                risks.append(risk)
        return {"risks": risks}


def build_analysis_graph(cfg: Settings | None = None) -> StageGraph:
    nodes = PipelineNodes(cfg)
    return StageGraph(
        [
            Stage("segmentation", nodes.segmentation),
            Stage("clause_analysis", nodes.clause_analysis, ("segmentation",)),
            Stage("risk_matching", nodes.risk_matching, ("segmentation",)),
        ]
    )


def analyze_text(
    text: str,
    document_id: str,
    cfg: Settings | None = None,
    base_date: date | None = None,
) -> dict[str, Any]:
    """Run the pure analysis graph and return clauses, obligations and risks."""
    ctx = build_analysis_graph(cfg).run({"text": text, "document_id": document_id, "base_date": base_date})
    return {
        "units": ctx["segmentation"]["units"],
        "clauses": ctx["clause_analysis"]["clauses"],
        "obligations": ctx["clause_analysis"]["obligations"],
        "risks": ctx["risk_matching"]["risks"],
        "stage_durations_ms": ctx["stage_durations_ms"],
    }
