from datetime import datetime, timezone as dt_timezone

from django.test import SimpleTestCase, TestCase

from grading.exceptions import NotFoundError
from grading.services import store
from grading.services.analytics import build_class_analytics, compute_class_analytics
from grading.services.assessments import Assessment, SourceKind
from schools.models import Class, LearningArea, School, Student


def entry(level, strand, student_id=1, assessment_type="observation", day=None):
    return Assessment(
        source=SourceKind.STRAND,
        student_id=student_id,
        performance_level=level,
        strand=strand,
        assessment_type=assessment_type,
        recorded_at=datetime(2025, 2, day, 9, tzinfo=dt_timezone.utc) if day else None,
    )


class BuildClassAnalyticsTests(SimpleTestCase):
    def test_empty_input_yields_zero_structure(self):
        analytics = build_class_analytics([])
        self.assertEqual(analytics.total_assessments, 0)
        self.assertEqual(analytics.performance_distribution, {"EM": 0, "AP": 0, "PR": 0, "AD": 0})
        self.assertEqual(analytics.strand_performance, {})
        self.assertEqual(analytics.total_students, 0)
        self.assertEqual(analytics.average_performance, 0.0)
        self.assertIsNone(analytics.overall_performance_level)
        self.assertIsNone(analytics.top_performing_strand)
        self.assertEqual(analytics.distribution_percentages(), {"EM": 0.0, "AP": 0.0, "PR": 0.0, "AD": 0.0})

    def test_counts_every_raw_entry(self):
        entries = [
            entry("AD", "Reading", student_id=1, assessment_type="oral"),
            entry("AD", "Reading", student_id=1, assessment_type="oral"),
            entry("EM", "Writing", student_id=2),
            entry("PR", "Writing", student_id=3, assessment_type="project"),
        ]
        analytics = build_class_analytics(entries)
        self.assertEqual(analytics.total_assessments, 4)
        self.assertEqual(sum(analytics.performance_distribution.values()), analytics.total_assessments)
        self.assertEqual(analytics.performance_distribution["AD"], 2)
        self.assertEqual(analytics.total_students, 3)
        self.assertEqual(analytics.total_strands, 2)
        self.assertEqual(analytics.assessment_type_distribution, {"oral": 2, "observation": 1, "project": 1})
        self.assertEqual(analytics.strand_performance["Reading"].total, 2)
        self.assertAlmostEqual(analytics.average_performance, 3.0)
        self.assertEqual(analytics.overall_performance_level, "PR")
        self.assertEqual(analytics.top_performing_strand, "Reading")

    def test_top_strand_tie_keeps_first_encountered(self):
        analytics = build_class_analytics([entry("PR", "Listening"), entry("PR", "Speaking"), entry("EM", "Grammar")])
        self.assertEqual(analytics.top_performing_strand, "Listening")

    def test_strand_performance_payload(self):
        analytics = build_class_analytics([entry("EM", "Fractions"), entry("AD", "Fractions")])
        payload = analytics.as_dict()["strand_performance"]["Fractions"]
        self.assertEqual(payload["EM"], 1)
        self.assertEqual(payload["AD"], 1)
        self.assertEqual(payload["total"], 2)
        self.assertEqual(payload["average"], 2.5)
        self.assertEqual(payload["performance_level"], "PR")

    def test_progress_over_time_is_grouped_by_day(self):
        analytics = build_class_analytics(
            [entry("AD", "A", day=3), entry("EM", "A", day=1), entry("AP", "B", day=3), entry("PR", "B")]
        )
        self.assertEqual(
            analytics.progress_over_time,
            [
                {"date": "2025-02-01", "average_performance": 1.0, "total_assessments": 1},
                {"date": "2025-02-03", "average_performance": 3.0, "total_assessments": 2},
            ],
        )

    def test_distribution_percentages(self):
        analytics = build_class_analytics([entry("EM", "A"), entry("AD", "A"), entry("AD", "B"), entry("AD", "B")])
        self.assertEqual(analytics.distribution_percentages(), {"EM": 25.0, "AP": 0.0, "PR": 0.0, "AD": 75.0})


class ComputeClassAnalyticsTests(TestCase):
    def setUp(self):
        school = School.objects.create(name="Baraka Primary", academic_year="2025")
        self.klass = Class.objects.create(school=school, name="Grade 5 West", level="Grade 5")
        self.other = Class.objects.create(school=school, name="Grade 5 East", level="Grade 5")
        self.math = LearningArea.objects.get(school=school, code="MATH")
        self.eng = LearningArea.objects.get(school=school, code="ENG")
        self.s1 = Student.objects.create(first_name="Amani", last_name="Otieno", admission_number="B-1", klass=self.klass)
        self.s2 = Student.objects.create(first_name="Zawadi", last_name="Chebet", admission_number="B-2", klass=self.klass)
        outsider = Student.objects.create(first_name="Juma", last_name="Hassan", admission_number="B-3", klass=self.other)

        self._strand(self.s1, self.klass, self.math, "Fractions", "AD")
        self._strand(self.s2, self.klass, self.math, "Geometry", "EM")
        self._strand(outsider, self.other, self.math, "Fractions", "EM")
        store.upsert_grade(
            {
                "student_id": self.s1.id,
                "class_id": self.klass.id,
                "subject_id": self.eng.id,
                "performance_level": "PR",
                "term": "T1",
                "academic_year": "2025",
            }
        )

    def _strand(self, student, klass, area, strand, level, term="T1"):
        store.upsert_strand_assessment(
            {
                "student_id": student.id,
                "class_id": klass.id,
                "subject_id": area.id,
                "strand_name": strand,
                "performance_level": level,
                "term": term,
                "academic_year": "2025",
            }
        )

    def test_merges_strands_and_grades_for_the_class(self):
        analytics = compute_class_analytics(self.klass.id, term="T1", academic_year="2025")
        self.assertEqual(analytics.total_assessments, 3)
        self.assertEqual(analytics.total_students, 2)
        self.assertEqual(analytics.performance_distribution, {"EM": 1, "AP": 0, "PR": 1, "AD": 1})
        # grades are labelled by learning area with a General assessment type
        self.assertIn("English", analytics.strand_performance)
        self.assertEqual(analytics.assessment_type_distribution["General"], 1)
        self.assertEqual(analytics.top_performing_strand, "Fractions")

    def test_subject_filter(self):
        analytics = compute_class_analytics(self.klass.id, subject_id=self.math.id)
        self.assertEqual(analytics.total_assessments, 2)
        self.assertNotIn("English", analytics.strand_performance)

    def test_term_without_data(self):
        analytics = compute_class_analytics(self.klass.id, term="T3")
        self.assertEqual(analytics.total_assessments, 0)
        self.assertIsNone(analytics.top_performing_strand)

    def test_unknown_class(self):
        with self.assertRaises(NotFoundError):
            compute_class_analytics(999999)
