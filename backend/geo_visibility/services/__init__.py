from .analysis_service import analyze_visibility
from .batch_runner import Task, build_tasks, run_tasks
from .competitor_cleaner import filter_generic, is_generic_name
from .competitor_merger import collect_candidates, merge_candidate
from .competitor_normalizer import normalize_name
from .competitor_resolver import find_competitors, rank_competitors, resolve_competitors
from .competitor_validator import llm_validate_names, validate_candidates
from .geo_context import detect_geo_context
from .judge import JudgeEvaluator, run_judge
from .relevance_scorer import relevance_score, score_and_rank
from .responder import run_responder
from .scoring_engine import compute_visibility_score
from .verdict_aggregation import aggregate_judge_results

__all__ = [
    "analyze_visibility",
    "Task",
    "build_tasks",
    "run_tasks",
    "JudgeEvaluator",
    "run_judge",
    "run_responder",
    "compute_visibility_score",
    "aggregate_judge_results",
    "normalize_name",
    "is_generic_name",
    "filter_generic",
    "collect_candidates",
    "merge_candidate",
    "detect_geo_context",
    "relevance_score",
    "score_and_rank",
    "llm_validate_names",
    "validate_candidates",
    "rank_competitors",
    "resolve_competitors",
    "find_competitors",
]
