"""
Data-access adapter onto the assessment/attendance store.

Every read returns plain values or unified Assessment entries; store failures
surface as UpstreamFetchError so callers can retry.
"""
import functools
import logging
from datetime import date
from typing import List, Optional, Tuple

from django.db import DatabaseError, transaction

from grading.exceptions import NotFoundError, UpstreamFetchError
from grading.services.assessments import Assessment, from_grade, from_strand_assessment
from grading.services.levels import normalize_level
from schools.models import (
    AttendanceRecord,
    Class,
    Grade,
    LearningArea,
    PerformanceDescriptor,
    StrandAssessment,
    Student,
)

logger = logging.getLogger(__name__)


def _upstream(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as exc:
            logger.warning("Store call failed", extra={"call": func.__name__, "error": str(exc)})
            raise UpstreamFetchError(f"{func.__name__} failed: {exc}") from exc

    return wrapper


def _filter_stream(qs, class_id, subject_id, term, academic_year, student_id):
    if class_id:
        qs = qs.filter(klass_id=class_id)
    if subject_id:
        qs = qs.filter(learning_area_id=subject_id)
    if term:
        qs = qs.filter(term=term)
    if academic_year:
        qs = qs.filter(academic_year=academic_year)
    if student_id:
        qs = qs.filter(student_id=student_id)
    # oldest write first, so "last" always means most recent
    return qs.order_by("updated_at", "id")


@_upstream
def get_student(student_id) -> Student:
    student = Student.objects.select_related("klass__school").filter(pk=student_id).first()
    if student is None:
        raise NotFoundError("Student", student_id)
    return student


@_upstream
def get_class(class_id) -> Class:
    klass = Class.objects.select_related("school").filter(pk=class_id).first()
    if klass is None:
        raise NotFoundError("Class", class_id)
    return klass


@_upstream
def get_learning_area(subject_id) -> LearningArea:
    area = LearningArea.objects.filter(pk=subject_id).first()
    if area is None:
        raise NotFoundError("LearningArea", subject_id)
    return area


@_upstream
def fetch_strand_assessments(
    class_id=None, subject_id=None, term=None, academic_year=None, student_id=None
) -> List[Assessment]:
    qs = _filter_stream(StrandAssessment.objects.all(), class_id, subject_id, term, academic_year, student_id)
    return [from_strand_assessment(r) for r in qs]


@_upstream
def fetch_grades(class_id=None, subject_id=None, term=None, academic_year=None, student_id=None) -> List[Assessment]:
    qs = _filter_stream(
        Grade.objects.select_related("learning_area"), class_id, subject_id, term, academic_year, student_id
    )
    return [from_grade(r) for r in qs]


def fetch_assessment_stream(
    class_id=None, subject_id=None, term=None, academic_year=None, student_id=None
) -> List[Assessment]:
    entries = fetch_strand_assessments(class_id, subject_id, term, academic_year, student_id)
    entries.extend(fetch_grades(class_id, subject_id, term, academic_year, student_id))
    return entries


@_upstream
def fetch_learning_areas(subject_id=None, class_id=None, school_id=None) -> List[LearningArea]:
    qs = LearningArea.objects.all()
    if subject_id:
        qs = qs.filter(pk=subject_id)
    if class_id:
        qs = qs.filter(school__class__id=class_id)
    if school_id:
        qs = qs.filter(school_id=school_id)
    return list(qs.order_by("name", "id"))


@_upstream
def fetch_performance_descriptors(school_id=None, learning_area_id=None) -> List[PerformanceDescriptor]:
    # Descriptors are school-scoped; a learning area narrows to its school.
    qs = PerformanceDescriptor.objects.all()
    if learning_area_id:
        qs = qs.filter(school__learning_areas__id=learning_area_id)
    if school_id:
        qs = qs.filter(school_id=school_id)
    return list(qs.order_by("weight"))


@_upstream
def fetch_attendance(student_id, class_id, date_range: Optional[Tuple[date, date]] = None) -> List[AttendanceRecord]:
    qs = AttendanceRecord.objects.filter(student_id=student_id, klass_id=class_id)
    if date_range:
        start, end = date_range
        qs = qs.filter(date__gte=start, date__lte=end)
    return list(qs.order_by("date"))


@_upstream
def fetch_class_students(class_id) -> List[Student]:
    return list(Student.objects.filter(klass_id=class_id).order_by("id"))


@_upstream
def upsert_strand_assessment(data: dict) -> Tuple[StrandAssessment, bool]:
    """
    Insert or overwrite the assessment for (student, strand, sub-strand, term,
    year). Concurrent writers race; the last one wins.
    """
    key = {
        "student_id": data["student_id"],
        "strand_name": data["strand_name"],
        "sub_strand_name": data.get("sub_strand_name") or "",
        "term": data["term"],
        "academic_year": data["academic_year"],
    }
    defaults = {
        "klass_id": data["class_id"],
        "learning_area_id": data["subject_id"],
        "assessment_type": data.get("assessment_type") or "observation",
        "performance_level": normalize_level(data["performance_level"]),
        "teacher_remarks": data.get("teacher_remarks") or "",
    }
    with transaction.atomic():
        record, created = StrandAssessment.objects.update_or_create(defaults=defaults, **key)
    logger.info(
        "Strand assessment saved",
        extra={"record_id": record.id, "was_created": created, **key},
    )
    return record, created


@_upstream
def upsert_grade(data: dict) -> Tuple[Grade, bool]:
    key = {
        "student_id": data["student_id"],
        "learning_area_id": data["subject_id"],
        "term": data["term"],
        "academic_year": data["academic_year"],
    }
    defaults = {
        "klass_id": data["class_id"],
        "performance_level": normalize_level(data["performance_level"]),
        "performance_descriptor": data.get("performance_descriptor") or "",
        "teacher_remarks": data.get("teacher_remarks") or "",
    }
    with transaction.atomic():
        record, created = Grade.objects.update_or_create(defaults=defaults, **key)
    logger.info("Grade saved", extra={"record_id": record.id, "was_created": created, **key})
    return record, created
