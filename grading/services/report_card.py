import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Tuple

from django.utils import timezone

from grading.exceptions import GradingError
from grading.services import store
from grading.services.aggregation import StrandResult, aggregate_strands, configured_type_weights, roll_up_subject
from grading.services.assessments import DEFAULT_LABEL, Assessment
from grading.services.levels import LEVEL_NAMES
from grading.services.taxonomy import get_performance_descriptors

logger = logging.getLogger(__name__)

ATTENDANCE_STATUSES = ("present", "absent", "late", "excused")


@dataclass
class AttendanceSummary:
    present: int = 0
    absent: int = 0
    late: int = 0
    excused: int = 0

    @property
    def total(self) -> int:
        return self.present + self.absent + self.late + self.excused

    @property
    def percentage(self) -> float:
        if not self.total:
            return 0.0
        return self.present * 100 / self.total

    def as_dict(self) -> dict:
        return {
            "present": self.present,
            "absent": self.absent,
            "late": self.late,
            "excused": self.excused,
            "total": self.total,
            "percentage": round(self.percentage, 2),
        }


@dataclass
class SubjectReport:
    subject_id: Optional[int]
    subject_name: str
    performance_level: str
    average: float
    strands: List[StrandResult]
    teacher_remarks: str = ""
    assessment_count: int = 0
    descriptor: str = ""

    def as_dict(self) -> dict:
        return {
            "subject_id": self.subject_id,
            "subject_name": self.subject_name,
            "performance_level": self.performance_level,
            "level_name": LEVEL_NAMES[self.performance_level],
            "descriptor": self.descriptor,
            "average": round(self.average, 2),
            "strand_performances": {s.strand: s.performance_level for s in self.strands},
            "strands": [s.as_dict() for s in self.strands],
            "teacher_remarks": self.teacher_remarks,
            "assessment_count": self.assessment_count,
        }


@dataclass
class ReportCardData:
    student_id: int
    student_name: str
    class_id: int
    class_name: str
    term: str
    academic_year: str
    school_name: str = ""
    general_remarks: str = ""
    principal_remarks: str = ""
    subjects: List[SubjectReport] = field(default_factory=list)
    subject_errors: Dict[str, str] = field(default_factory=dict)
    attendance: AttendanceSummary = field(default_factory=AttendanceSummary)
    generated_at: Optional[datetime] = None

    @property
    def attendance_percentage(self) -> float:
        return self.attendance.percentage

    def as_dict(self) -> dict:
        return {
            "student_id": self.student_id,
            "student_name": self.student_name,
            "class_id": self.class_id,
            "class_name": self.class_name,
            "school_name": self.school_name,
            "term": self.term,
            "academic_year": self.academic_year,
            "subjects": [s.as_dict() for s in self.subjects],
            "subject_errors": dict(self.subject_errors),
            "attendance": self.attendance.as_dict(),
            "attendance_percentage": round(self.attendance_percentage, 2),
            "general_remarks": self.general_remarks,
            "principal_remarks": self.principal_remarks,
            "generated_at": self.generated_at.isoformat() if self.generated_at else None,
        }


@dataclass
class BatchResult:
    reports: List[ReportCardData] = field(default_factory=list)
    failures: List[Dict] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "reports": [r.as_dict() for r in self.reports],
            "failures": list(self.failures),
            "compiled": len(self.reports),
            "failed": len(self.failures),
        }


def summarize_attendance(records: Iterable) -> AttendanceSummary:
    summary = AttendanceSummary()
    for record in records:
        status = getattr(record, "status", record)
        if status in ATTENDANCE_STATUSES:
            setattr(summary, status, getattr(summary, status) + 1)
    return summary


def attendance_percentage(records: Iterable) -> float:
    return summarize_attendance(records).percentage


def academic_year_range(academic_year: str) -> Optional[Tuple[date, date]]:
    """'2025' -> whole calendar year; '2024-2025' -> 2024-01-01..2025-12-31."""
    years = re.findall(r"\d{4}", academic_year or "")
    if not years:
        return None
    return date(int(years[0]), 1, 1), date(int(years[-1]), 12, 31)


def _last_remark(assessments: List[Assessment]) -> str:
    remark = ""
    for assessment in assessments:
        if assessment.teacher_remarks and assessment.teacher_remarks.strip():
            remark = assessment.teacher_remarks.strip()
    return remark


def build_report_card(
    student,
    klass,
    term: str,
    academic_year: str,
    assessments: Iterable[Assessment],
    attendance: Iterable,
    subject_names: Optional[Dict] = None,
    descriptors: Optional[Dict[str, Dict]] = None,
    type_weights=None,
    generated_at: Optional[datetime] = None,
) -> ReportCardData:
    subject_names = subject_names or {}
    descriptors = descriptors or {}

    by_subject: Dict = {}
    for assessment in assessments:
        if assessment.student_id != student.id:
            continue
        by_subject.setdefault(assessment.subject_id, []).append(assessment)

    report = ReportCardData(
        student_id=student.id,
        student_name=f"{student.first_name} {student.last_name}".strip(),
        class_id=klass.id,
        class_name=klass.name,
        school_name=getattr(getattr(klass, "school", None), "name", ""),
        term=term,
        academic_year=academic_year,
        attendance=summarize_attendance(attendance),
        generated_at=generated_at or timezone.now(),
    )

    for subject_id, group in by_subject.items():
        name = subject_names.get(subject_id) or (DEFAULT_LABEL if subject_id is None else str(subject_id))
        try:
            strands = aggregate_strands(group, type_weights)
            rolled = roll_up_subject(strands.values())
        except ValueError as exc:
            logger.warning(
                "Subject skipped in report card",
                extra={"student_id": student.id, "subject_id": subject_id, "error": str(exc)},
            )
            report.subject_errors[name] = str(exc)
            continue
        if rolled is None:
            continue
        level, average = rolled
        report.subjects.append(
            SubjectReport(
                subject_id=subject_id,
                subject_name=name,
                performance_level=level,
                average=average,
                strands=list(strands.values()),
                teacher_remarks=_last_remark(group),
                assessment_count=len(group),
                descriptor=descriptors.get(level, {}).get("description", ""),
            )
        )

    report.subjects.sort(key=lambda s: (s.subject_name, s.subject_id or 0))
    return report


def compile_report_card(student_id, class_id, term, academic_year, generated_at=None) -> ReportCardData:
    student = store.get_student(student_id)
    klass = store.get_class(class_id)
    entries = store.fetch_assessment_stream(term=term, academic_year=academic_year, student_id=student.id)
    attendance = store.fetch_attendance(student.id, klass.id, academic_year_range(academic_year))
    subject_names = {area.id: area.name for area in store.fetch_learning_areas(school_id=klass.school_id)}
    report = build_report_card(
        student,
        klass,
        term,
        academic_year,
        entries,
        attendance,
        subject_names=subject_names,
        descriptors=get_performance_descriptors(klass.school_id),
        type_weights=configured_type_weights(),
        generated_at=generated_at,
    )
    logger.info(
        "Report card compiled",
        extra={
            "student_id": student.id,
            "class_id": klass.id,
            "term": term,
            "academic_year": academic_year,
            "subjects": len(report.subjects),
            "subject_errors": len(report.subject_errors),
        },
    )
    return report


def compile_report_cards(class_id, term, academic_year, student_ids=None) -> BatchResult:
    """
    Compile one report card per student. A student that fails is listed in
    failures and the batch carries on.
    """
    if student_ids is None:
        student_ids = [s.id for s in store.fetch_class_students(class_id)]
    result = BatchResult()
    generated_at = timezone.now()
    for student_id in student_ids:
        try:
            result.reports.append(compile_report_card(student_id, class_id, term, academic_year, generated_at))
        except GradingError as exc:
            logger.warning(
                "Report card failed",
                extra={"student_id": student_id, "class_id": class_id, "term": term, "error": str(exc)},
            )
            result.failures.append({"student_id": student_id, "error": type(exc).__name__, "detail": str(exc)})
    logger.info(
        "Report card batch done",
        extra={"class_id": class_id, "term": term, "compiled": len(result.reports), "failed": len(result.failures)},
    )
    return result
