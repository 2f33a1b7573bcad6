from django.contrib import admin
from django.urls import path

from grading.api import (
    ClassAnalyticsView,
    GradeUpsertView,
    ReportCardBatchView,
    ReportCardView,
    ResetMetricsView,
    StrandAssessmentUpsertView,
    SubjectSummaryView,
)


urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/classes/<int:class_id>/analytics/", ClassAnalyticsView.as_view(), name="class-analytics"),
    path(
        "api/students/<int:student_id>/subjects/<int:subject_id>/summary/",
        SubjectSummaryView.as_view(),
        name="subject-summary",
    ),
    path("api/students/<int:student_id>/report-card/", ReportCardView.as_view(), name="report-card"),
    path("api/report-cards/batch/", ReportCardBatchView.as_view(), name="report-card-batch"),
    path("api/strand-assessments/", StrandAssessmentUpsertView.as_view(), name="strand-assessment-upsert"),
    path("api/grades/", GradeUpsertView.as_view(), name="grade-upsert"),
    path("api/metrics/reset/", ResetMetricsView.as_view(), name="reset-metrics"),
]
