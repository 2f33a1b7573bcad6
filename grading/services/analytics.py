"""
Cohort analytics over the merged assessment stream of a class.

Distribution counts are per raw entry: a student assessed twice on a strand
contributes twice.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from grading.services import store
from grading.services.assessments import DEFAULT_LABEL, Assessment
from grading.services.levels import (
    LEVEL_NAMES,
    LEVEL_WEIGHTS,
    PERFORMANCE_LEVELS,
    empty_counts,
    level_from_average,
    normalize_level,
)

logger = logging.getLogger(__name__)


@dataclass
class StrandPerformance:
    counts: Dict[str, int] = field(default_factory=empty_counts)
    total: int = 0

    @property
    def average(self) -> float:
        if not self.total:
            return 0.0
        return sum(LEVEL_WEIGHTS[code] * n for code, n in self.counts.items()) / self.total

    @property
    def performance_level(self) -> Optional[str]:
        return level_from_average(self.average) if self.total else None

    def as_dict(self) -> dict:
        data = dict(self.counts)
        data["total"] = self.total
        data["average"] = round(self.average, 2)
        data["performance_level"] = self.performance_level
        return data


@dataclass
class ClassAnalytics:
    total_assessments: int = 0
    performance_distribution: Dict[str, int] = field(default_factory=empty_counts)
    strand_performance: Dict[str, StrandPerformance] = field(default_factory=dict)
    assessment_type_distribution: Dict[str, int] = field(default_factory=dict)
    total_students: int = 0
    total_strands: int = 0
    average_performance: float = 0.0
    overall_performance_level: Optional[str] = None
    top_performing_strand: Optional[str] = None
    progress_over_time: List[dict] = field(default_factory=list)

    def distribution_percentages(self) -> Dict[str, float]:
        if not self.total_assessments:
            return {code: 0.0 for code in PERFORMANCE_LEVELS}
        return {
            code: round(count * 100 / self.total_assessments, 1)
            for code, count in self.performance_distribution.items()
        }

    def as_dict(self) -> dict:
        return {
            "total_assessments": self.total_assessments,
            "performance_distribution": dict(self.performance_distribution),
            "distribution_percentages": self.distribution_percentages(),
            "strand_performance": {name: perf.as_dict() for name, perf in self.strand_performance.items()},
            "assessment_type_distribution": dict(self.assessment_type_distribution),
            "total_students": self.total_students,
            "total_strands": self.total_strands,
            "average_performance": round(self.average_performance, 2),
            "overall_performance_level": self.overall_performance_level,
            "overall_level_name": LEVEL_NAMES.get(self.overall_performance_level),
            "top_performing_strand": self.top_performing_strand,
            "progress_over_time": list(self.progress_over_time),
        }


def _progress_over_time(entries: List[Assessment]) -> List[dict]:
    by_day: Dict = {}
    for entry in entries:
        if entry.recorded_at is None:
            continue
        day = entry.recorded_at.date()
        bucket = by_day.setdefault(day, [0, 0])
        bucket[0] += LEVEL_WEIGHTS[normalize_level(entry.performance_level)]
        bucket[1] += 1
    return [
        {
            "date": day.isoformat(),
            "average_performance": round(total / count, 2),
            "total_assessments": count,
        }
        for day, (total, count) in sorted(by_day.items())
    ]


def build_class_analytics(entries: Iterable[Assessment]) -> ClassAnalytics:
    entries = list(entries)
    analytics = ClassAnalytics()
    if not entries:
        return analytics

    students = set()
    for entry in entries:
        code = normalize_level(entry.performance_level)
        analytics.performance_distribution[code] += 1

        strand = entry.strand or DEFAULT_LABEL
        perf = analytics.strand_performance.setdefault(strand, StrandPerformance())
        perf.counts[code] += 1
        perf.total += 1

        assessment_type = entry.assessment_type or DEFAULT_LABEL
        analytics.assessment_type_distribution[assessment_type] = (
            analytics.assessment_type_distribution.get(assessment_type, 0) + 1
        )
        students.add(entry.student_id)

    analytics.total_assessments = len(entries)
    analytics.total_students = len(students)
    analytics.total_strands = len(analytics.strand_performance)
    analytics.average_performance = (
        sum(LEVEL_WEIGHTS[code] * n for code, n in analytics.performance_distribution.items())
        / analytics.total_assessments
    )
    analytics.overall_performance_level = level_from_average(analytics.average_performance)

    # ties keep the strand encountered first
    best_average = None
    for strand, perf in analytics.strand_performance.items():
        if best_average is None or perf.average > best_average:
            best_average = perf.average
            analytics.top_performing_strand = strand

    analytics.progress_over_time = _progress_over_time(entries)
    return analytics


def compute_class_analytics(class_id, subject_id=None, term=None, academic_year=None) -> ClassAnalytics:
    klass = store.get_class(class_id)
    entries = store.fetch_assessment_stream(
        class_id=klass.id, subject_id=subject_id, term=term, academic_year=academic_year
    )
    analytics = build_class_analytics(entries)
    logger.info(
        "Class analytics computed",
        extra={
            "class_id": klass.id,
            "subject_id": subject_id,
            "term": term,
            "academic_year": academic_year,
            "total_assessments": analytics.total_assessments,
        },
    )
    return analytics
