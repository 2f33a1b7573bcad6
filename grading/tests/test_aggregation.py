from django.core.exceptions import ImproperlyConfigured
from django.test import SimpleTestCase, override_settings

from grading.exceptions import UnknownPerformanceLevel
from grading.services.aggregation import (
    aggregate_strand,
    aggregate_strands,
    configured_type_weights,
    roll_up_subject,
    summarize_subject,
)
from grading.services.assessments import Assessment, SourceKind


def entry(level, strand="Numbers", assessment_type="observation", student_id=1, subject_id=10):
    return Assessment(
        source=SourceKind.STRAND,
        student_id=student_id,
        subject_id=subject_id,
        performance_level=level,
        strand=strand,
        assessment_type=assessment_type,
        term="T1",
        academic_year="2025",
    )


class AggregateStrandTests(SimpleTestCase):
    def test_mixed_levels_round_half_up(self):
        result = aggregate_strand([entry("EM"), entry("EM"), entry("AD"), entry("AD")])
        self.assertEqual(result.performance_level, "PR")
        self.assertEqual(result.average, 2.5)
        self.assertEqual(result.counts, {"EM": 2, "AP": 0, "PR": 0, "AD": 2})
        self.assertEqual(result.assessment_count, 4)

    def test_single_assessment_keeps_its_level(self):
        self.assertEqual(aggregate_strand([entry("ap")]).performance_level, "AP")

    def test_empty_input(self):
        self.assertIsNone(aggregate_strand([]))

    def test_type_weights(self):
        assessments = [entry("EM", assessment_type="observation"), entry("AD", assessment_type="project")]
        result = aggregate_strand(assessments, {"observation": 1, "project": 3})
        # (1*1 + 4*3) / 4
        self.assertAlmostEqual(result.average, 3.25)
        self.assertEqual(result.performance_level, "PR")

    @override_settings(CBC_DEFAULT_TYPE_WEIGHT=0)
    def test_all_zero_weights_fall_back_to_equal_weighting(self):
        assessments = [entry("EM", assessment_type="oral"), entry("AD", assessment_type="quiz")]
        result = aggregate_strand(assessments, {"project": 5})
        self.assertEqual(result.average, 2.5)
        self.assertEqual(result.performance_level, "PR")

    def test_negative_type_weight_is_rejected(self):
        assessments = [entry("EM", assessment_type="observation"), entry("AD", assessment_type="project")]
        with self.assertRaises(ImproperlyConfigured):
            aggregate_strand(assessments, {"observation": -1, "project": 2})

    def test_non_numeric_type_weight_is_rejected(self):
        with self.assertRaises(ImproperlyConfigured):
            aggregate_strand([entry("PR")], {"observation": "heavy"})

    @override_settings(CBC_ASSESSMENT_TYPE_WEIGHTS={"project": float("inf")})
    def test_configured_weights_are_validated(self):
        with self.assertRaises(ImproperlyConfigured):
            configured_type_weights()

    @override_settings(CBC_ASSESSMENT_TYPE_WEIGHTS={"observation": 20, "project": 25})
    def test_configured_weights(self):
        self.assertEqual(configured_type_weights(), {"observation": 20.0, "project": 25.0})

    def test_unknown_level_raises(self):
        with self.assertRaises(UnknownPerformanceLevel):
            aggregate_strand([entry("PR"), entry("ZZ")])


class SubjectRollUpTests(SimpleTestCase):
    def test_groups_by_strand_in_encounter_order(self):
        results = aggregate_strands([entry("AD", "Geometry"), entry("EM", "Numbers"), entry("AD", "Geometry")])
        self.assertEqual(list(results), ["Geometry", "Numbers"])
        self.assertEqual(results["Geometry"].performance_level, "AD")

    def test_strands_weigh_equally(self):
        # three AD on one strand must not outvote a single EM strand
        results = aggregate_strands([entry("AD", "A"), entry("AD", "A"), entry("AD", "A"), entry("EM", "B")])
        self.assertEqual(roll_up_subject(results.values()), ("PR", 2.5))

    def test_strand_weights(self):
        results = aggregate_strands([entry("AD", "A"), entry("EM", "B")])
        level, average = roll_up_subject(results.values(), {"A": 5})
        self.assertEqual(level, "AD")
        self.assertAlmostEqual(average, 3.5)

    def test_summary(self):
        summary = summarize_subject(1, 10, "T1", "2025", [entry("EM", "A"), entry("PR", "B"), entry("AD", "C")])
        self.assertEqual(summary.performance_level, "PR")
        self.assertEqual([s.strand for s in summary.strands], ["A", "B", "C"])
        data = summary.as_dict()
        self.assertEqual(data["level_name"], "Proficient")
        self.assertEqual(data["average"], 2.67)

    def test_summary_without_assessments(self):
        self.assertIsNone(summarize_subject(1, 10, "T1", "2025", []))
