"""
CSV and JSON reports for offline inspection.
"""
import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel

from ..models.report import ModelScores
from ..utils.helpers import file_timestamp, sanitize_filename, tag_list, timestamp_now, to_plain

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# metric -> minimum (percent) for PASS in the per-model report
MODEL_THRESHOLDS = {
    "coverage": 30.0,
    "intent": 50.0,
    "golden": 30.0,
    "golden_coverage": 30.0,
}


def _reports_path(reports_dir: PathLike, filename: str) -> Path:
    directory = Path(reports_dir)
    directory.mkdir(parents=True, exist_ok=True)
    return directory / sanitize_filename(filename)


def _status(passed: bool) -> str:
    return "PASS" if passed else "FAIL"


def write_json_report(data: Any, name: str, reports_dir: PathLike) -> Path:
    """
    Write ``data`` as indented JSON to ``<name>-<timestamp>.json``.

    Args:
        data: Pydantic model or JSON-serializable value
        name: File name prefix
        reports_dir: Target directory, created when missing

    Returns:
        Path of the written file
    """
    path = _reports_path(reports_dir, f"{name}-{file_timestamp()}.json")
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, default=str)
    logger.info(f"JSON report written to {path}")
    return path


def write_model_report(
    model: str,
    tests: Sequence[Any],
    scores: ModelScores,
    metrics: Optional[Dict[str, Any]],
    reports_dir: PathLike,
) -> Path:
    """
    Write the CSV report for one generator run.

    Sections: header, scores against thresholds, API metrics, one row per test.
    """
    metrics = metrics or {}
    path = _reports_path(reports_dir, f"eval-{model}-{file_timestamp()}.csv")

    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["# Eval Report"])
        writer.writerow(["Model", model])
        writer.writerow(["Timestamp", timestamp_now()])
        writer.writerow(["Tests Generated", len(tests)])
        writer.writerow([])

        writer.writerow(["# Scores"])
        writer.writerow(["Metric", "Value", "Threshold", "Status"])
        writer.writerow(["Structure Valid", scores.structure_valid, True, _status(scores.structure_valid)])
        for label, value, key in (
            ("Coverage Score", scores.coverage_score, "coverage"),
            ("Intent Score", scores.intent_score, "intent"),
            ("Golden Similarity", scores.golden_score, "golden"),
            ("Golden Category Coverage", scores.golden_coverage, "golden_coverage"),
        ):
            threshold = MODEL_THRESHOLDS[key]
            writer.writerow([label, f"{value:.1f}%", f"{threshold:.0f}%", _status(value >= threshold)])
        writer.writerow([])

        writer.writerow(["# API Metrics"])
        writer.writerow(["Metric", "Value"])
        writer.writerow(["Latency (ms)", metrics.get("latency_ms", scores.latency_ms)])
        writer.writerow(["Total Tokens", metrics.get("total_tokens", scores.tokens_used)])
        writer.writerow(["Prompt Tokens", metrics.get("prompt_tokens") or "N/A"])
        writer.writerow(["Completion Tokens", metrics.get("completion_tokens") or "N/A"])
        writer.writerow([])

        writer.writerow(["# Generated Tests"])
        writer.writerow(["ID", "Name", "Priority", "Run Mode", "User Requested", "Tags"])
        for test in tests:
            test = to_plain(test)
            writer.writerow([
                test.get("id"),
                test.get("name"),
                test.get("priority"),
                test.get("run_mode"),
                bool(test.get("user_requested", False)),
                ";".join(tag_list(test)),
            ])

    logger.info(f"Model report written to {path}")
    return path


def write_comparison_report(model_scores: Sequence[ModelScores], pointer: str, reports_dir: PathLike) -> Path:
    """Rank several generator runs by overall score, latency and token use."""
    path = _reports_path(reports_dir, f"eval-comparison-{file_timestamp()}.csv")

    succeeded: List[ModelScores] = sorted(
        (s for s in model_scores if not s.error), key=lambda s: s.overall_score, reverse=True
    )
    failed = [s for s in model_scores if s.error]

    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["# Model Comparison Report"])
        writer.writerow(["Timestamp", timestamp_now()])
        writer.writerow(["Pointer", pointer])
        writer.writerow([])

        writer.writerow(["# Model Scores"])
        writer.writerow([
            "Model", "Tests", "Structure Valid", "Coverage %", "Intent %", "Golden %",
            "Golden Cat %", "Latency (ms)", "Tokens", "Overall %", "Status",
        ])
        for s in succeeded:
            passed = s.structure_valid and s.coverage_score >= 20 and s.intent_score >= 30
            writer.writerow([
                s.model, s.test_count, s.structure_valid,
                f"{s.coverage_score:.1f}", f"{s.intent_score:.1f}", f"{s.golden_score:.1f}",
                f"{s.golden_coverage:.1f}", s.latency_ms, s.tokens_used,
                f"{s.overall_score:.1f}", _status(passed),
            ])
        for s in failed:
            writer.writerow([s.model, 0, False, 0, 0, 0, 0, 0, 0, 0, f"FAIL - {s.error}"])
        writer.writerow([])

        writer.writerow(["# Rankings"])
        writer.writerow(["By Overall Score"])
        writer.writerow(["Rank", "Model", "Score"])
        for rank, s in enumerate(succeeded, 1):
            writer.writerow([rank, s.model, f"{s.overall_score:.1f}%"])
        writer.writerow([])

        writer.writerow(["By Latency"])
        writer.writerow(["Rank", "Model", "Latency (ms)"])
        for rank, s in enumerate(sorted(succeeded, key=lambda s: s.latency_ms), 1):
            writer.writerow([rank, s.model, s.latency_ms])
        writer.writerow([])

        writer.writerow(["By Token Efficiency"])
        writer.writerow(["Rank", "Model", "Tokens"])
        for rank, s in enumerate(sorted(succeeded, key=lambda s: s.tokens_used), 1):
            writer.writerow([rank, s.model, s.tokens_used])

    logger.info(f"Comparison report written to {path}")
    return path
