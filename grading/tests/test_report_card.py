from datetime import date, datetime, timedelta, timezone as dt_timezone
from unittest.mock import patch

from django.test import SimpleTestCase, TestCase

from grading.exceptions import NotFoundError, UpstreamFetchError
from grading.services import store
from grading.services.assessments import Assessment, SourceKind
from grading.services.report_card import (
    academic_year_range,
    attendance_percentage,
    build_report_card,
    compile_report_card,
    compile_report_cards,
    summarize_attendance,
)
from schools.models import AttendanceRecord, Class, LearningArea, School, Student

FIXED_AT = datetime(2025, 4, 1, 8, tzinfo=dt_timezone.utc)


class AttendanceTests(SimpleTestCase):
    def test_percentage(self):
        self.assertEqual(attendance_percentage(["present"] * 18 + ["absent"] * 2), 90.0)

    def test_no_days_recorded(self):
        self.assertEqual(attendance_percentage([]), 0.0)

    def test_late_and_excused_count_as_not_present(self):
        summary = summarize_attendance(["present", "late", "excused", "absent"])
        self.assertEqual(summary.total, 4)
        self.assertEqual(summary.percentage, 25.0)

    def test_academic_year_range(self):
        self.assertEqual(academic_year_range("2025"), (date(2025, 1, 1), date(2025, 12, 31)))
        self.assertEqual(academic_year_range("2024-2025"), (date(2024, 1, 1), date(2025, 12, 31)))
        self.assertIsNone(academic_year_range(""))


class BuildReportCardTests(SimpleTestCase):
    class Obj:
        def __init__(self, **kwargs):
            self.__dict__.update(kwargs)

    def setUp(self):
        self.student = self.Obj(id=1, first_name="Amani", last_name="Otieno")
        self.klass = self.Obj(id=7, name="Grade 4 East", school=self.Obj(name="Mwangaza"))

    def _entry(self, level, strand, subject_id=10, remarks="", student_id=1):
        return Assessment(
            source=SourceKind.STRAND,
            student_id=student_id,
            subject_id=subject_id,
            performance_level=level,
            strand=strand,
            teacher_remarks=remarks,
        )

    def test_last_remark_wins_and_foreign_entries_are_ignored(self):
        entries = [
            self._entry("PR", "Numbers", remarks="Good start"),
            self._entry("PR", "Geometry", remarks="Much improved"),
            self._entry("AD", "Fractions", remarks="  "),
            self._entry("EM", "Numbers", student_id=2, remarks="Not mine"),
        ]
        report = build_report_card(self.student, self.klass, "T1", "2025", entries, [], {10: "Mathematics"}, generated_at=FIXED_AT)
        subject = report.subjects[0]
        self.assertEqual(subject.teacher_remarks, "Much improved")
        self.assertEqual(subject.assessment_count, 3)
        self.assertEqual(report.school_name, "Mwangaza")

    def test_bad_subject_is_reported_without_dropping_the_rest(self):
        entries = [self._entry("AD", "Reading", subject_id=11), self._entry("QQ", "Numbers", subject_id=10)]
        report = build_report_card(
            self.student, self.klass, "T1", "2025", entries, [], {10: "Mathematics", 11: "English"}, generated_at=FIXED_AT
        )
        self.assertEqual([s.subject_name for s in report.subjects], ["English"])
        self.assertIn("Mathematics", report.subject_errors)

    def test_remark_fields_default_to_empty(self):
        report = build_report_card(self.student, self.klass, "T1", "2025", [], [], generated_at=FIXED_AT)
        data = report.as_dict()
        self.assertEqual(data["general_remarks"], "")
        self.assertEqual(data["principal_remarks"], "")

    def test_subjects_sorted_by_name(self):
        entries = [self._entry("AD", "Reading", subject_id=11), self._entry("PR", "Numbers", subject_id=10)]
        report = build_report_card(
            self.student, self.klass, "T1", "2025", entries, [], {10: "Mathematics", 11: "English"}, generated_at=FIXED_AT
        )
        self.assertEqual([s.subject_name for s in report.subjects], ["English", "Mathematics"])

    def test_descriptor_text_attached(self):
        descriptors = {"AD": {"description": "Exceptional"}}
        report = build_report_card(
            self.student, self.klass, "T1", "2025", [self._entry("AD", "Reading")], [], descriptors=descriptors, generated_at=FIXED_AT
        )
        self.assertEqual(report.subjects[0].descriptor, "Exceptional")
        self.assertEqual(report.subjects[0].subject_name, "10")


class CompileReportCardTests(TestCase):
    def setUp(self):
        self.school = School.objects.create(name="Mwangaza Primary", academic_year="2025")
        self.klass = Class.objects.create(school=self.school, name="Grade 4 East", level="Grade 4")
        self.math = LearningArea.objects.get(school=self.school, code="MATH")
        self.student = Student.objects.create(
            first_name="Wanjiru", last_name="Kamau", admission_number="MPS-1", klass=self.klass
        )
        self.empty_student = Student.objects.create(
            first_name="Baraka", last_name="Mwangi", admission_number="MPS-2", klass=self.klass
        )
        for strand, level in (("Numbers", "EM"), ("Geometry", "PR"), ("Measurement", "AD")):
            store.upsert_strand_assessment(
                {
                    "student_id": self.student.id,
                    "class_id": self.klass.id,
                    "subject_id": self.math.id,
                    "strand_name": strand,
                    "performance_level": level,
                    "teacher_remarks": f"{strand} noted",
                    "term": "T1",
                    "academic_year": "2025",
                }
            )
        start = date(2025, 2, 3)
        for day in range(20):
            AttendanceRecord.objects.create(
                student=self.student,
                klass=self.klass,
                date=start + timedelta(days=day),
                status="absent" if day < 2 else "present",
            )
        # outside the academic year
        AttendanceRecord.objects.create(student=self.student, klass=self.klass, date=date(2024, 11, 4), status="absent")

    def test_report_card_contents(self):
        report = compile_report_card(self.student.id, self.klass.id, "T1", "2025", generated_at=FIXED_AT)
        self.assertEqual(report.student_name, "Wanjiru Kamau")
        self.assertEqual(len(report.subjects), 1)
        math = report.subjects[0]
        self.assertEqual(math.subject_name, "Mathematics")
        self.assertEqual(math.performance_level, "PR")
        self.assertEqual({s.strand: s.performance_level for s in math.strands}, {"Numbers": "EM", "Geometry": "PR", "Measurement": "AD"})
        self.assertEqual(math.teacher_remarks, "Measurement noted")
        self.assertEqual(math.descriptor, "Demonstrates good understanding and application")
        self.assertEqual(report.attendance_percentage, 90.0)
        self.assertEqual(report.as_dict()["attendance"]["total"], 20)

    def test_compilation_is_repeatable(self):
        first = compile_report_card(self.student.id, self.klass.id, "T1", "2025", generated_at=FIXED_AT)
        second = compile_report_card(self.student.id, self.klass.id, "T1", "2025", generated_at=FIXED_AT)
        self.assertEqual(first.as_dict(), second.as_dict())

    def test_student_without_assessments(self):
        report = compile_report_card(self.empty_student.id, self.klass.id, "T1", "2025", generated_at=FIXED_AT)
        self.assertEqual(report.subjects, [])
        self.assertEqual(report.attendance_percentage, 0.0)

    def test_unknown_student(self):
        with self.assertRaises(NotFoundError):
            compile_report_card(424242, self.klass.id, "T1", "2025")

    def test_batch_collects_failures(self):
        result = compile_report_cards(self.klass.id, "T1", "2025", student_ids=[self.student.id, 424242, self.empty_student.id])
        self.assertEqual([r.student_id for r in result.reports], [self.student.id, self.empty_student.id])
        self.assertEqual(result.failures, [{"student_id": 424242, "error": "NotFoundError", "detail": "Student 424242 not found"}])
        self.assertEqual(result.as_dict()["compiled"], 2)

    def test_batch_defaults_to_whole_class(self):
        result = compile_report_cards(self.klass.id, "T1", "2025")
        self.assertEqual(len(result.reports), 2)
        self.assertEqual(result.failures, [])

    @patch("grading.services.report_card.store.fetch_attendance", side_effect=UpstreamFetchError("db down"))
    def test_store_failure_is_a_batch_failure(self, _mock):
        result = compile_report_cards(self.klass.id, "T1", "2025", student_ids=[self.student.id])
        self.assertEqual(result.reports, [])
        self.assertEqual(result.failures[0]["error"], "UpstreamFetchError")
