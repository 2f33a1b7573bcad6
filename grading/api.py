import logging

import redis
from django.conf import settings
from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from grading.exceptions import InvalidMarkRange, NotFoundError, UnknownPerformanceLevel, UpstreamFetchError
from grading.services import store
from grading.services.aggregation import compute_subject_summary
from grading.services.analytics import compute_class_analytics
from grading.services.levels import PERFORMANCE_LEVELS
from grading.services.metrics import mark_queued, reset_metrics
from grading.services.report_card import compile_report_card
from grading.tasks import compile_class_report_cards
from schools.models import TERM_CHOICES, StrandAssessment

logger = logging.getLogger(__name__)

TERMS = [c[0] for c in TERM_CHOICES]


def error_response(exc):
    if isinstance(exc, NotFoundError):
        return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(exc, (InvalidMarkRange, UnknownPerformanceLevel)):
        return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
    return Response({"detail": str(exc)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)


GRADING_ERRORS = (NotFoundError, InvalidMarkRange, UnknownPerformanceLevel, UpstreamFetchError)


class AnalyticsQuerySerializer(serializers.Serializer):
    subject_id = serializers.IntegerField(required=False)
    term = serializers.ChoiceField(choices=TERMS, required=False)
    academic_year = serializers.CharField(required=False, max_length=16)


class PeriodQuerySerializer(serializers.Serializer):
    term = serializers.ChoiceField(choices=TERMS)
    academic_year = serializers.CharField(max_length=16)


class ReportCardQuerySerializer(PeriodQuerySerializer):
    class_id = serializers.IntegerField()


class BatchReportSerializer(PeriodQuerySerializer):
    class_id = serializers.IntegerField()
    student_ids = serializers.ListField(child=serializers.IntegerField(), required=False, allow_empty=False)


class StrandAssessmentSerializer(serializers.Serializer):
    student_id = serializers.IntegerField()
    class_id = serializers.IntegerField()
    subject_id = serializers.IntegerField()
    strand_name = serializers.CharField(max_length=128)
    sub_strand_name = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")
    assessment_type = serializers.ChoiceField(
        choices=[c[0] for c in StrandAssessment.ASSESSMENT_TYPES], required=False, default="observation"
    )
    performance_level = serializers.CharField(max_length=8)
    teacher_remarks = serializers.CharField(required=False, allow_blank=True, default="")
    term = serializers.ChoiceField(choices=TERMS)
    academic_year = serializers.CharField(max_length=16)

    def validate_performance_level(self, value):
        normalized = value.strip().upper()
        if normalized not in PERFORMANCE_LEVELS:
            raise serializers.ValidationError(f"Expected one of {', '.join(PERFORMANCE_LEVELS)}.")
        return normalized


class GradeSerializer(serializers.Serializer):
    student_id = serializers.IntegerField()
    class_id = serializers.IntegerField()
    subject_id = serializers.IntegerField()
    performance_level = serializers.CharField(max_length=8)
    performance_descriptor = serializers.CharField(required=False, allow_blank=True, default="")
    teacher_remarks = serializers.CharField(required=False, allow_blank=True, default="")
    term = serializers.ChoiceField(choices=TERMS)
    academic_year = serializers.CharField(max_length=16)

    validate_performance_level = StrandAssessmentSerializer.validate_performance_level


class ClassAnalyticsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, class_id):
        serializer = AnalyticsQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        try:
            analytics = compute_class_analytics(class_id, **serializer.validated_data)
        except GRADING_ERRORS as exc:
            return error_response(exc)
        return Response(analytics.as_dict())


class SubjectSummaryView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, student_id, subject_id):
        serializer = PeriodQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        try:
            summary = compute_subject_summary(student_id, subject_id, **serializer.validated_data)
        except GRADING_ERRORS as exc:
            return error_response(exc)
        if summary is None:
            # no assessments yet: a valid, empty summary
            return Response({"student_id": student_id, "subject_id": subject_id, "strands": [], "performance_level": None})
        return Response(summary.as_dict())


class ReportCardView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, student_id):
        serializer = ReportCardQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            report = compile_report_card(student_id, data["class_id"], data["term"], data["academic_year"])
        except GRADING_ERRORS as exc:
            return error_response(exc)
        return Response(report.as_dict())


class ReportCardBatchView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = BatchReportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        args = [data["class_id"], data["term"], data["academic_year"], data.get("student_ids")]
        try:
            klass = store.get_class(data["class_id"])
        except GRADING_ERRORS as exc:
            return error_response(exc)

        if getattr(settings, "CELERY_TASK_ALWAYS_EAGER", False):
            result = compile_class_report_cards.apply(args=args).get()
            return Response(result, status=status.HTTP_200_OK)

        try:
            mark_queued(len(data["student_ids"]) if data.get("student_ids") else klass.students.count())
        except redis.RedisError as exc:
            logger.warning("Unable to record queued metrics: %s", exc)
        async_result = compile_class_report_cards.delay(*args)
        return Response({"task_id": async_result.id, "status": "PENDING"}, status=status.HTTP_202_ACCEPTED)


class StrandAssessmentUpsertView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = StrandAssessmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            store.get_student(data["student_id"])
            store.get_class(data["class_id"])
            store.get_learning_area(data["subject_id"])
            record, created = store.upsert_strand_assessment(data)
        except GRADING_ERRORS as exc:
            return error_response(exc)
        return Response(
            {"id": record.id, "performance_level": record.performance_level, "created": created},
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class GradeUpsertView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = GradeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            store.get_student(data["student_id"])
            store.get_class(data["class_id"])
            store.get_learning_area(data["subject_id"])
            record, created = store.upsert_grade(data)
        except GRADING_ERRORS as exc:
            return error_response(exc)
        return Response(
            {"id": record.id, "performance_level": record.performance_level, "created": created},
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class ResetMetricsView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        try:
            reset_metrics()
        except redis.RedisError as exc:
            return Response({"detail": f"Redis unavailable: {exc}"}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response({"detail": "Metrics reset"}, status=status.HTTP_200_OK)
