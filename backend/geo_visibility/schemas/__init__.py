# Schemas package
from .entity_schema import EntitySnapshot
from .judge_schema import JudgeVerdict, fallback_verdict
from .analysis_schema import AnalysisRequest, AnalysisResult, PromptResult, ScoreRequest, VisibilityScore
from .competitor_schema import (
    CompetitorCandidate,
    CompetitorResolveRequest,
    CompetitorResolveResponse,
    GeoContext,
    RawCandidate,
    ValidationVerdict,
)

__all__ = [
    "EntitySnapshot",
    "JudgeVerdict",
    "fallback_verdict",
    "PromptResult",
    "AnalysisResult",
    "AnalysisRequest",
    "ScoreRequest",
    "VisibilityScore",
    "RawCandidate",
    "CompetitorCandidate",
    "ValidationVerdict",
    "GeoContext",
    "CompetitorResolveRequest",
    "CompetitorResolveResponse",
]
