import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from grading.services import store
from grading.services.assessments import Assessment
from grading.services.levels import LEVEL_NAMES, empty_counts, normalize_level, reduce_levels

logger = logging.getLogger(__name__)


@dataclass
class StrandResult:
    strand: str
    performance_level: str
    average: float
    counts: Dict[str, int]
    assessment_count: int

    def as_dict(self) -> dict:
        data = asdict(self)
        data["average"] = round(self.average, 2)
        data["level_name"] = LEVEL_NAMES[self.performance_level]
        return data


@dataclass
class SubjectSummary:
    student_id: int
    subject_id: Optional[int]
    term: str
    academic_year: str
    performance_level: str
    average: float
    strands: List[StrandResult] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "student_id": self.student_id,
            "subject_id": self.subject_id,
            "term": self.term,
            "academic_year": self.academic_year,
            "performance_level": self.performance_level,
            "level_name": LEVEL_NAMES[self.performance_level],
            "average": round(self.average, 2),
            "strands": [s.as_dict() for s in self.strands],
        }


def _check_weight(name, value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ImproperlyConfigured(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value) or value < 0:
        raise ImproperlyConfigured(f"{name} must be a finite number >= 0, got {value!r}")
    return float(value)


def validate_type_weights(type_weights: Optional[Mapping[str, float]]) -> Dict[str, float]:
    """Every weight, the default included, must be a finite number >= 0."""
    _check_weight("CBC_DEFAULT_TYPE_WEIGHT", getattr(settings, "CBC_DEFAULT_TYPE_WEIGHT", 1.0))
    return {
        key: _check_weight(f"CBC_ASSESSMENT_TYPE_WEIGHTS[{key!r}]", value)
        for key, value in (type_weights or {}).items()
    }


def configured_type_weights() -> Dict[str, float]:
    return validate_type_weights(getattr(settings, "CBC_ASSESSMENT_TYPE_WEIGHTS", {}) or {})


def _type_weight(assessment_type: str, type_weights: Optional[Mapping[str, float]]) -> float:
    if not type_weights:
        return 1.0
    default = float(getattr(settings, "CBC_DEFAULT_TYPE_WEIGHT", 1.0))
    return float(type_weights.get(assessment_type, default))


def aggregate_strand(
    assessments: Iterable[Assessment], type_weights: Optional[Mapping[str, float]] = None
) -> Optional[StrandResult]:
    """
    Reduce all assessments of one (student, subject, strand, term, year) to a
    representative level. Returns None when there is nothing to reduce.
    """
    assessments = list(assessments)
    if not assessments:
        return None
    if type_weights:
        type_weights = validate_type_weights(type_weights)

    counts = empty_counts()
    pairs = []
    for assessment in assessments:
        code = normalize_level(assessment.performance_level)
        counts[code] += 1
        pairs.append((code, _type_weight(assessment.assessment_type, type_weights)))

    reduced = reduce_levels(pairs)
    if reduced is None:
        logger.warning(
            "All assessment type weights are zero, using equal weighting",
            extra={"strand": assessments[0].strand, "count": len(assessments)},
        )
        reduced = reduce_levels((code, 1.0) for code, _ in pairs)
    level, average = reduced
    return StrandResult(
        strand=assessments[0].strand,
        performance_level=level,
        average=average,
        counts=counts,
        assessment_count=len(assessments),
    )


def aggregate_strands(
    assessments: Iterable[Assessment], type_weights: Optional[Mapping[str, float]] = None
) -> Dict[str, StrandResult]:
    """Group by strand name (first-encountered order) and aggregate each group."""
    groups: Dict[str, List[Assessment]] = {}
    for assessment in assessments:
        groups.setdefault(assessment.strand, []).append(assessment)
    results = {}
    for strand, group in groups.items():
        result = aggregate_strand(group, type_weights)
        if result is not None:
            results[strand] = result
    return results


def roll_up_subject(
    strand_results: Iterable[StrandResult], strand_weights: Optional[Mapping[str, float]] = None
):
    """(level, average) over strand levels, strands weighted equally by default."""
    pairs = [
        (result.performance_level, float((strand_weights or {}).get(result.strand, 1.0)))
        for result in strand_results
    ]
    if not pairs:
        return None
    return reduce_levels(pairs)


def summarize_subject(
    student_id,
    subject_id,
    term,
    academic_year,
    assessments: Iterable[Assessment],
    type_weights: Optional[Mapping[str, float]] = None,
) -> Optional[SubjectSummary]:
    strands = aggregate_strands(assessments, type_weights)
    rolled = roll_up_subject(strands.values())
    if rolled is None:
        return None
    level, average = rolled
    return SubjectSummary(
        student_id=student_id,
        subject_id=subject_id,
        term=term,
        academic_year=academic_year,
        performance_level=level,
        average=average,
        strands=list(strands.values()),
    )


def compute_subject_summary(student_id, subject_id, term, academic_year) -> Optional[SubjectSummary]:
    student = store.get_student(student_id)
    store.get_learning_area(subject_id)
    entries = store.fetch_assessment_stream(
        subject_id=subject_id, term=term, academic_year=academic_year, student_id=student.id
    )
    summary = summarize_subject(student.id, subject_id, term, academic_year, entries, configured_type_weights())
    logger.info(
        "Subject summary computed",
        extra={
            "student_id": student.id,
            "subject_id": subject_id,
            "term": term,
            "entries": len(entries),
            "level": summary.performance_level if summary else None,
        },
    )
    return summary
