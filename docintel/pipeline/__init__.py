from docintel.pipeline.classifier import ClauseClassification, classify_clause
from docintel.pipeline.confidence import ConfidencePolicy, clause_requires_review, fuse_confidence
from docintel.pipeline.nodes import analyze_text, build_analysis_graph
from docintel.pipeline.risk_patterns import RISK_PATTERNS, match_risk_indicators
from docintel.pipeline.segmenter import segment
from docintel.pipeline.signals import detect_ambiguity, extract_actors, extract_deadlines, extract_dependencies

__all__ = [
    "ClauseClassification",
    "classify_clause",
    "ConfidencePolicy",
    "fuse_confidence",
    "clause_requires_review",
    "analyze_text",
    "build_analysis_graph",
    "RISK_PATTERNS",
    "match_risk_indicators",
    "segment",
    "extract_actors",
    "extract_deadlines",
    "extract_dependencies",
    "detect_ambiguity",
]
