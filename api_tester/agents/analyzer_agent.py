"""
Analyzer Agent - Scores generated batches, triages run logs and writes reports
"""
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, List, Optional

from .base_agent import BaseAgent
from ..config import EvalConfig, settings
from ..exceptions import GenerationError
from ..evaluation.coverage import analyze_coverage, analyze_tag_diversity, calculate_coverage_score, check_uniqueness
from ..evaluation.golden import check_category_coverage, compare_test_suite
from ..evaluation.intent import evaluate_intent_alignment
from ..evaluation.reporter import write_comparison_report, write_json_report, write_model_report
from ..evaluation.structure import validate_tests
from ..models.execution_result import RunLog
from ..models.report import EvaluationResult, ModelScores, Report, RunSummary, TriageNote
from ..utils.helpers import compact_json, timestamp_now, to_plain

SEVERITY_ORDER = {"HIGH": 0, "MEDIUM": 1, "LOW": 2}


def _outcome(log: RunLog) -> str:
    response = log.response
    if response is None or response.error or response.status is None:
        return "transport_error"
    if response.status >= 500:
        return "server_error"
    if response.status >= 400:
        return "client_error"
    return "success"


class AnalyzerAgent(BaseAgent):
    """
    Analyzes generated tests and their execution.
    Provides:
    - Batch evaluation (structure, coverage, intent, golden)
    - Run summary and flaky detection
    - Triage notes with the request to replay
    - JSON/CSV report generation
    """

    def __init__(self, reports_dir: Optional[Path] = None):
        super().__init__(
            name="Analyzer",
            description="Evaluates batches, triages runs and generates reports"
        )
        self.reports_dir = reports_dir

    async def execute(self, context: Dict[str, Any]) -> Dict[str, Any]:
        """Execute evaluation, triage and report generation."""
        tests = context.get("test_cases", [])
        evaluation = self.evaluate(
            context.get("pointer", ""),
            tests,
            golden_tests=context.get("golden_tests"),
            config=context.get("eval_config"),
        )
        report = self.generate_report(
            session_id=context.get("session_id", "adhoc"),
            pointer=context.get("pointer", ""),
            tests=tests,
            evaluation=evaluation,
            run_logs=context.get("run_logs", []),
            model=context.get("model", "synthetic"),
        )
        return {"evaluation": evaluation, "report": report}

    # Evaluation

    def evaluate(
        self,
        pointer: str,
        tests: List[Any],
        golden_tests: Optional[List[Any]] = None,
        config: Optional[EvalConfig] = None,
    ) -> EvaluationResult:
        """
        Run every scorer over one batch.

        Args:
            pointer: Pointer the batch was generated from
            tests: Generated tests (dicts or TestCase models)
            golden_tests: Reference suite; golden scores are omitted without one
            config: Thresholds, defaults when omitted

        Returns:
            Frozen EvaluationResult
        """
        config = config or EvalConfig()
        self.log_info(f"Evaluating {len(tests)} tests for pointer '{pointer}'")

        structure = validate_tests(tests, config.structure)
        coverage = analyze_coverage(tests, config.coverage)
        coverage_score = calculate_coverage_score(coverage)
        intent = evaluate_intent_alignment(pointer, tests, config.intent)
        tag_diversity = analyze_tag_diversity(tests, config.quality)
        uniqueness = check_uniqueness(tests)

        golden = None
        golden_categories = None
        if golden_tests:
            golden = compare_test_suite(tests, golden_tests)
            golden_categories = check_category_coverage(tests, golden_tests)

        warnings = self._quality_warnings(tests, tag_diversity, uniqueness, config)
        for warning in warnings:
            self.log_warning(warning)

        return EvaluationResult(
            structure_valid=structure.valid,
            structure_errors=structure.errors,
            valid_count=structure.valid_count,
            invalid_count=structure.invalid_count,
            coverage=coverage,
            coverage_score=coverage_score,
            intent=intent,
            golden=golden,
            golden_categories=golden_categories,
            tag_diversity=tag_diversity,
            uniqueness=uniqueness,
            warnings=warnings,
        )

    def _quality_warnings(self, tests, tag_diversity, uniqueness, config: EvalConfig) -> List[str]:
        warnings = []
        quality = config.quality

        if not tag_diversity.meets_threshold:
            warnings.append(
                f"Low tag diversity: {tag_diversity.diversity} unique tags, expected at least {quality.min_tag_diversity}"
            )
        if uniqueness.duplicates:
            warnings.append(f"Duplicate test names: {', '.join(uniqueness.duplicates)}")
        if uniqueness.duplicate_bodies:
            warnings.append(f"{uniqueness.duplicate_bodies} tests repeat another test's body")
        if uniqueness.total_count and uniqueness.unique_count / uniqueness.total_count < quality.min_unique_scenarios:
            warnings.append(
                f"Only {uniqueness.unique_count}/{uniqueness.total_count} unique scenarios "
                f"(minimum {quality.min_unique_scenarios:.0%})"
            )

        short = [
            str(to_plain(t).get("name") or "")
            for t in tests
            if len(str(to_plain(t).get("name") or "")) < quality.min_test_name_length
        ]
        if short:
            warnings.append(f"Test names shorter than {quality.min_test_name_length} characters: {', '.join(short)}")
        return warnings

    def model_scores(
        self,
        model: str,
        test_count: int,
        evaluation: EvaluationResult,
        latency_ms: int = 0,
        tokens_used: int = 0,
    ) -> ModelScores:
        """Headline scores (percent) of one generator run."""
        return ModelScores(
            model=model,
            test_count=test_count,
            structure_valid=evaluation.structure_valid,
            coverage_score=evaluation.coverage_score.score,
            intent_score=evaluation.intent_score * 100,
            golden_score=(evaluation.golden_score or 0.0) * 100,
            golden_coverage=evaluation.golden_categories.coverage_percent if evaluation.golden_categories else 0.0,
            latency_ms=latency_ms,
            tokens_used=tokens_used,
        )

    async def compare_models(
        self,
        pointer: str,
        request_config: Any,
        count: int,
        planners: List[Any],
        golden_tests: Optional[List[Any]] = None,
        config: Optional[EvalConfig] = None,
    ) -> Dict[str, Any]:
        """
        Generate the same batch with several planners and rank them.

        A planner whose generation fails is reported with its error and does
        not stop the comparison.

        Args:
            pointer: Natural language test pointer
            request_config: Base request shared by every planner
            count: Number of tests each planner is asked for
            planners: PlannerAgent instances, one per model
            golden_tests: Reference suite for the golden scores

        Returns:
            Dict with the ModelScores list and the paths of the written reports
        """
        reports_dir = self.reports_dir or settings.REPORTS_DIR
        scores: List[ModelScores] = []
        runs: Dict[str, Any] = {}

        for planner in planners:
            model = planner.model_name
            self.log_info(f"Comparing model {model}")
            try:
                tests = await planner.generate_tests(pointer, request_config, count)
            except GenerationError as e:
                self.log_error(f"Model {model} failed: {e}")
                scores.append(ModelScores(model=model, error=str(e)))
                runs[model] = {"success": False, "error": str(e), "tests": []}
                continue

            evaluation = self.evaluate(pointer, tests, golden_tests=golden_tests, config=config)
            scores.append(self.model_scores(
                model, len(tests), evaluation, planner.last_latency_ms, planner.last_tokens_used
            ))
            runs[model] = {
                "success": True,
                "tests": tests,
                "metrics": {"latency_ms": planner.last_latency_ms, "total_tokens": planner.last_tokens_used},
            }

        report_path = write_comparison_report(scores, pointer, reports_dir)
        json_path = write_json_report(
            {"pointer": pointer, "requested_count": count, "generated_at": timestamp_now(), "models": runs},
            "tests-comparison",
            reports_dir,
        )
        return {"scores": scores, "report_path": str(report_path), "json_path": str(json_path)}

    # Execution analysis

    def _group_runs(self, logs: List[RunLog]) -> "OrderedDict[str, List[RunLog]]":
        groups: "OrderedDict[str, List[RunLog]]" = OrderedDict()
        for log in logs:
            key = log.test_id or f"{log.test_name}:{compact_json(log.request)}"
            groups.setdefault(key, []).append(log)
        return groups

    def summarize_runs(self, logs: List[RunLog]) -> RunSummary:
        """Executive summary of the executed requests."""
        total = len(logs)
        if total == 0:
            return RunSummary(
                total_runs=0,
                successful=0,
                client_errors=0,
                server_errors=0,
                transport_errors=0,
                flaky=0,
                success_rate=0,
                overall_status="NO_RUNS",
            )

        outcomes = [_outcome(log) for log in logs]
        successful = outcomes.count("success")
        success_rate = round((successful / total) * 100, 2)
        flaky = sum(1 for runs in self._group_runs(logs).values() if self._is_flaky(runs))

        if success_rate >= 90:
            overall_status = "HEALTHY"
        elif success_rate >= 70:
            overall_status = "MODERATE"
        elif success_rate >= 50:
            overall_status = "CONCERNING"
        else:
            overall_status = "CRITICAL"

        return RunSummary(
            total_runs=total,
            successful=successful,
            client_errors=outcomes.count("client_error"),
            server_errors=outcomes.count("server_error"),
            transport_errors=outcomes.count("transport_error"),
            flaky=flaky,
            success_rate=success_rate,
            overall_status=overall_status,
        )

    @staticmethod
    def _is_flaky(runs: List[RunLog]) -> bool:
        statuses = {run.response.status if run.response else None for run in runs}
        return len(statuses) > 1 and any(_outcome(run) != "success" for run in runs)

    def triage(self, logs: List[RunLog]) -> List[TriageNote]:
        """
        Triage notes for every test with a non-success run.

        A test whose runs came back with different statuses is FLAKY.
        """
        notes = []
        for runs in self._group_runs(logs).values():
            outcomes = [_outcome(run) for run in runs]
            if all(o == "success" for o in outcomes):
                continue

            statuses = [run.response.status if run.response else None for run in runs]
            errors = list(OrderedDict.fromkeys(run.response.error for run in runs if run.response and run.response.error))
            latest = runs[-1]

            if self._is_flaky(runs):
                verdict = "FLAKY"
                severity = "HIGH" if "server_error" in outcomes else "MEDIUM"
                issue = f"Inconsistent responses across {len(runs)} runs: {self._status_text(statuses)}"
            elif "transport_error" in outcomes:
                verdict = "TRANSPORT_ERROR"
                severity = "MEDIUM"
                issue = f"Request never got a response: {errors[0] if errors else 'unknown error'}"
            else:
                verdict = "FAIL"
                severity = "HIGH" if "server_error" in outcomes else "LOW"
                issue = f"Non-success status {self._status_text(statuses)}"

            notes.append(TriageNote(
                test_name=latest.test_name,
                severity=severity,
                verdict=verdict,
                issue=issue,
                recommended_action=self._recommended_action(verdict, outcomes),
                statuses=statuses,
                errors=errors[:3],
                replay_request=dict(latest.request),
            ))

        notes.sort(key=lambda n: SEVERITY_ORDER.get(n.severity, len(SEVERITY_ORDER)))
        return notes

    @staticmethod
    def _status_text(statuses: List[Optional[int]]) -> str:
        return ", ".join("no response" if s is None else str(s) for s in statuses)

    @staticmethod
    def _recommended_action(verdict: str, outcomes: List[str]) -> str:
        if verdict == "FLAKY":
            return "Replay the request several times and compare server logs for the differing runs"
        if verdict == "TRANSPORT_ERROR":
            return "Check the target URL, network access and timeout, then replay"
        if "server_error" in outcomes:
            return "Server error - investigate the upstream handler for this input"
        return "Client error - confirm the rejection is the intended validation behaviour"

    def recommendations(
        self,
        evaluation: Optional[EvaluationResult],
        summary: RunSummary,
        notes: List[TriageNote],
    ) -> List[str]:
        """Overall recommendations based on evaluation and runs."""
        recommendations = []

        if evaluation is not None:
            if not evaluation.structure_valid:
                recommendations.append(
                    f"{evaluation.invalid_count} generated tests fail schema validation. Regenerate or fix them before running."
                )
            if evaluation.coverage_score.gaps:
                recommendations.append(f"Coverage gaps: {'; '.join(evaluation.coverage_score.gaps)}.")
            if not evaluation.intent.overall_valid:
                recommendations.append(
                    "The first tests do not clearly reflect the pointer. Rephrase the pointer or regenerate."
                )

        if summary.total_runs:
            if summary.success_rate < 50:
                recommendations.append(
                    "Critical: Success rate is below 50%. Prioritize the server errors in the triage notes."
                )
            elif summary.success_rate < 80:
                recommendations.append(
                    "Warning: Success rate is below 80%. Review the failing requests."
                )
            if summary.flaky > 0:
                recommendations.append(
                    f"Found {summary.flaky} flaky tests. Replay them to confirm nondeterministic server behaviour."
                )
            if summary.server_errors > 0:
                recommendations.append(
                    f"{summary.server_errors} requests caused server errors. Inputs should be rejected with 4xx instead."
                )

        if not recommendations:
            recommendations.append(
                "Test suite is healthy! Consider expanding test coverage."
            )
        return recommendations

    # Reports

    def generate_report(
        self,
        session_id: str,
        pointer: str,
        tests: List[Any],
        evaluation: Optional[EvaluationResult] = None,
        run_logs: Optional[List[RunLog]] = None,
        model: str = "synthetic",
        latency_ms: int = 0,
        tokens_used: int = 0,
    ) -> Report:
        """
        Generate the session report and write it as JSON and CSV.

        Args:
            session_id: Session identifier
            pointer: Pointer of the session
            tests: Generated tests
            evaluation: Result of ``evaluate``; the CSV is skipped without it
            run_logs: Executed requests
            model: Generator that produced the tests

        Returns:
            Report with the paths of the written files
        """
        self.log_info(f"Generating report for session {session_id}")
        run_logs = run_logs or []
        reports_dir = self.reports_dir or settings.REPORTS_DIR

        summary = self.summarize_runs(run_logs)
        notes = self.triage(run_logs)
        report = Report(
            report_id=f"report_{session_id}",
            session_id=session_id,
            generated_at=timestamp_now(),
            pointer=pointer,
            test_count=len(tests),
            evaluation=evaluation,
            run_summary=summary,
            triage_notes=notes,
            recommendations=self.recommendations(evaluation, summary, notes),
        )

        csv_path = None
        if evaluation is not None:
            scores = self.model_scores(model, len(tests), evaluation, latency_ms, tokens_used)
            csv_path = write_model_report(
                model, tests, scores, {"latency_ms": latency_ms, "total_tokens": tokens_used}, reports_dir
            )

        report_path = write_json_report(report, f"{session_id}_report", reports_dir)
        report = report.model_copy(update={
            "report_path": str(report_path),
            "csv_path": str(csv_path) if csv_path else None,
        })

        self.log_info(f"Report generated: {report_path}")
        return report
