"""
Report Data Model
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ValidationResult(BaseModel):
    """Schema check of one test."""

    valid: bool
    errors: List[str] = Field(default_factory=list)


class BatchValidation(BaseModel):
    """Schema check of a batch; errors are prefixed with the test index."""

    valid: bool
    errors: List[str] = Field(default_factory=list)
    valid_count: int = 0
    invalid_count: int = 0


class CoverageCategory(BaseModel):
    """Tests found for one edge-case category."""

    found: List[str] = Field(default_factory=list)
    count: int = 0
    required: int = 0


class CoverageScore(BaseModel):
    """Share of categories meeting their minimum."""

    score: float
    passed: int
    total: int
    gaps: List[str] = Field(default_factory=list)


class TagDiversity(BaseModel):
    unique_tags: List[str] = Field(default_factory=list)
    diversity: int = 0
    meets_threshold: bool = False


class Uniqueness(BaseModel):
    unique_count: int
    total_count: int
    duplicates: List[str] = Field(default_factory=list)
    duplicate_bodies: int = 0
    is_unique: bool = True


class KeywordMatch(BaseModel):
    score: float
    matched_keywords: List[str] = Field(default_factory=list)
    unmatched_keywords: List[str] = Field(default_factory=list)


class FlagCheck(BaseModel):
    valid: bool
    actual: int
    expected: int
    details: List[str] = Field(default_factory=list)


class UserRequestedAlignment(BaseModel):
    count: int
    alignment_score: float
    meets_threshold: bool
    details: List[KeywordMatch] = Field(default_factory=list)


class ExploratoryAlignment(BaseModel):
    valid: bool = True
    score: float = 0.0
    tests_count: int = 0


class IntentAlignment(BaseModel):
    """Result of evaluating a batch against its pointer."""

    keywords: List[str] = Field(default_factory=list)
    user_requested_tests: UserRequestedAlignment
    flag_check: FlagCheck
    exploratory_tests: ExploratoryAlignment
    overall_valid: bool


class TestComparison(BaseModel):
    __test__ = False

    score: float
    matches: List[str] = Field(default_factory=list)
    mismatches: List[str] = Field(default_factory=list)


class MatchPair(BaseModel):
    generated: str
    golden: str
    score: float
    matches: List[str] = Field(default_factory=list)
    mismatches: List[str] = Field(default_factory=list)


class GoldenCoverage(BaseModel):
    golden_covered: int = 0
    golden_missed: List[str] = Field(default_factory=list)


class SuiteComparison(BaseModel):
    """Generated suite against a golden suite."""

    total_generated: int
    total_golden: int
    matches: List[MatchPair] = Field(default_factory=list)
    average_score: float = 0.0
    coverage_report: GoldenCoverage = Field(default_factory=GoldenCoverage)


class CategoryCoverage(BaseModel):
    covered: List[str] = Field(default_factory=list)
    missing: List[str] = Field(default_factory=list)
    coverage_percent: float = 100.0


class EvaluationResult(BaseModel):
    """Scores for one generated batch."""

    structure_valid: bool
    structure_errors: List[str] = Field(default_factory=list)
    valid_count: int = 0
    invalid_count: int = 0
    coverage: Dict[str, CoverageCategory] = Field(default_factory=dict)
    coverage_score: CoverageScore
    intent: IntentAlignment
    golden: Optional[SuiteComparison] = None
    golden_categories: Optional[CategoryCoverage] = None
    tag_diversity: TagDiversity
    uniqueness: Uniqueness
    warnings: List[str] = Field(default_factory=list)

    class Config:
        frozen = True

    @property
    def intent_score(self) -> float:
        return self.intent.user_requested_tests.alignment_score

    @property
    def golden_score(self) -> Optional[float]:
        return self.golden.average_score if self.golden else None


class RunSummary(BaseModel):
    """Report summary of executed requests."""

    total_runs: int
    successful: int
    client_errors: int
    server_errors: int
    transport_errors: int
    flaky: int
    success_rate: float
    overall_status: str  # HEALTHY, MODERATE, CONCERNING, CRITICAL, NO_RUNS


class TriageNote(BaseModel):
    """Triage note for a failed/flaky test."""

    test_name: str
    severity: str  # HIGH, MEDIUM, LOW
    verdict: str  # FAIL, FLAKY, TRANSPORT_ERROR
    issue: str
    recommended_action: str
    statuses: List[Optional[int]] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    replay_request: Dict[str, Any] = Field(default_factory=dict)


class ModelScores(BaseModel):
    """Headline scores of one generator run, used for comparison reports."""

    model: str
    test_count: int = 0
    structure_valid: bool = False
    coverage_score: float = 0.0
    intent_score: float = 0.0  # percent
    golden_score: float = 0.0  # percent
    golden_coverage: float = 0.0  # percent
    latency_ms: int = 0
    tokens_used: int = 0
    error: Optional[str] = None

    @property
    def overall_score(self) -> float:
        return (self.coverage_score + self.intent_score + self.golden_score) / 3


class Report(BaseModel):
    """Complete session report."""

    report_id: str
    session_id: str
    generated_at: str
    pointer: str = ""
    test_count: int = 0
    evaluation: Optional[EvaluationResult] = None
    run_summary: Optional[RunSummary] = None
    triage_notes: List[TriageNote] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    report_path: Optional[str] = None
    csv_path: Optional[str] = None

    class Config:
        extra = "allow"
