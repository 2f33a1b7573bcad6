from django.contrib import admin

from .models import (
    AttendanceRecord,
    Class,
    Grade,
    LearningArea,
    PerformanceDescriptor,
    School,
    Student,
    StrandAssessment,
)


@admin.register(School)
class SchoolAdmin(admin.ModelAdmin):
    list_display = ("name", "country", "academic_year")
    search_fields = ("name", "country", "academic_year")


@admin.register(Class)
class ClassAdmin(admin.ModelAdmin):
    list_display = ("name", "level", "school", "total_students")
    list_filter = ("school", "level")
    search_fields = ("name", "level", "school__name")


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ("first_name", "last_name", "admission_number", "klass")
    search_fields = ("first_name", "last_name", "admission_number", "klass__name", "klass__school__name")
    list_filter = ("klass",)


@admin.register(LearningArea)
class LearningAreaAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "grade_level", "school")
    list_filter = ("school", "grade_level")
    search_fields = ("name", "code", "school__name")


@admin.register(PerformanceDescriptor)
class PerformanceDescriptorAdmin(admin.ModelAdmin):
    list_display = ("level_code", "level_name", "weight", "school", "is_default")
    list_filter = ("school", "level_code", "is_default")


@admin.register(StrandAssessment)
class StrandAssessmentAdmin(admin.ModelAdmin):
    list_display = ("student", "learning_area", "strand_name", "sub_strand_name", "performance_level", "term", "academic_year")
    list_filter = ("performance_level", "assessment_type", "term", "academic_year", "learning_area")
    search_fields = ("student__first_name", "student__last_name", "student__admission_number", "strand_name")


@admin.register(Grade)
class GradeAdmin(admin.ModelAdmin):
    list_display = ("student", "learning_area", "performance_level", "term", "academic_year")
    list_filter = ("performance_level", "term", "academic_year", "learning_area__school")
    search_fields = ("student__first_name", "student__last_name", "learning_area__name")


@admin.register(AttendanceRecord)
class AttendanceRecordAdmin(admin.ModelAdmin):
    list_display = ("student", "klass", "date", "status")
    list_filter = ("status", "klass")
    search_fields = ("student__first_name", "student__last_name", "student__admission_number")
