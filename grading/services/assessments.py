"""
Unified raw assessment entry.

Strand assessments and flat learning-area grades reach the core as one record
type carrying a source discriminator, so every aggregation works on a single
shape.
"""
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional

DEFAULT_LABEL = "General"


class SourceKind(str, Enum):
    STRAND = "strand"
    GRADE = "grade"


@dataclass(frozen=True)
class Assessment:
    source: SourceKind
    student_id: int
    performance_level: str
    strand: str = DEFAULT_LABEL
    sub_strand: str = ""
    assessment_type: str = DEFAULT_LABEL
    class_id: Optional[int] = None
    subject_id: Optional[int] = None
    teacher_remarks: str = ""
    term: str = ""
    academic_year: str = ""
    recorded_at: Optional[datetime] = None
    record_id: Optional[int] = None

    def as_dict(self) -> dict:
        data = asdict(self)
        data["source"] = self.source.value
        data["recorded_at"] = self.recorded_at.isoformat() if self.recorded_at else None
        return data


def from_strand_assessment(record) -> Assessment:
    return Assessment(
        source=SourceKind.STRAND,
        record_id=record.id,
        student_id=record.student_id,
        class_id=record.klass_id,
        subject_id=record.learning_area_id,
        strand=record.strand_name or DEFAULT_LABEL,
        sub_strand=record.sub_strand_name or "",
        assessment_type=record.assessment_type or DEFAULT_LABEL,
        performance_level=record.performance_level,
        teacher_remarks=record.teacher_remarks or "",
        term=record.term,
        academic_year=record.academic_year,
        recorded_at=record.updated_at,
    )


def from_grade(record) -> Assessment:
    # A grade is labelled by its learning area and has no assessment type.
    learning_area = getattr(record, "learning_area", None)
    label = getattr(learning_area, "name", "") or DEFAULT_LABEL
    return Assessment(
        source=SourceKind.GRADE,
        record_id=record.id,
        student_id=record.student_id,
        class_id=record.klass_id,
        subject_id=record.learning_area_id,
        strand=label,
        assessment_type=DEFAULT_LABEL,
        performance_level=record.performance_level,
        teacher_remarks=record.teacher_remarks or "",
        term=record.term,
        academic_year=record.academic_year,
        recorded_at=record.updated_at,
    )


def merge_streams(strand_assessments: Iterable, grades: Iterable) -> List[Assessment]:
    """Strand assessments first, then grades, each in their fetched order."""
    entries = [from_strand_assessment(r) for r in strand_assessments]
    entries.extend(from_grade(r) for r in grades)
    return entries
