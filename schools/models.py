from django.db import models


PERFORMANCE_LEVEL_CHOICES = [
    ("EM", "Emerging"),
    ("AP", "Approaching Proficiency"),
    ("PR", "Proficient"),
    ("AD", "Advanced"),
]

TERM_CHOICES = [("T1", "Term 1"), ("T2", "Term 2"), ("T3", "Term 3")]


class School(models.Model):
    name = models.CharField(max_length=255)
    address = models.TextField(blank=True)
    country = models.CharField(max_length=64, default="Kenya")
    motto = models.CharField(max_length=255, blank=True)
    academic_year = models.CharField(max_length=32)

    def __str__(self):
        return self.name


class Class(models.Model):
    school = models.ForeignKey(School, on_delete=models.CASCADE)
    name = models.CharField(max_length=64)
    level = models.CharField(max_length=64)
    total_students = models.PositiveIntegerField(default=0)

    def __str__(self):
        return f"{self.name} - {self.school.name}"


class Student(models.Model):
    first_name = models.CharField(max_length=64)
    last_name = models.CharField(max_length=64)
    admission_number = models.CharField(max_length=64, unique=True)
    klass = models.ForeignKey(Class, on_delete=models.CASCADE, related_name="students")

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self):
        return self.full_name


class LearningArea(models.Model):
    """CBC subject: the container strands are assessed under."""

    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="learning_areas")
    name = models.CharField(max_length=128)
    code = models.CharField(max_length=16)
    description = models.TextField(blank=True)
    grade_level = models.CharField(max_length=64, blank=True)

    def __str__(self):
        return f"{self.name} ({self.code})"

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["school", "code"], name="learningarea_school_code_uniq"),
        ]


class PerformanceDescriptor(models.Model):
    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="performance_descriptors")
    level_code = models.CharField(max_length=2, choices=PERFORMANCE_LEVEL_CHOICES)
    level_name = models.CharField(max_length=64)
    weight = models.PositiveSmallIntegerField()
    description = models.TextField(blank=True)
    color_code = models.CharField(max_length=7, blank=True)
    is_default = models.BooleanField(default=False)

    def __str__(self):
        return f"{self.level_code} - {self.school.name}"

    class Meta:
        ordering = ["weight"]
        constraints = [
            models.UniqueConstraint(fields=["school", "level_code"], name="descriptor_school_level_uniq"),
        ]


class StrandAssessment(models.Model):
    ASSESSMENT_TYPES = [
        ("observation", "Observation"),
        ("project", "Project"),
        ("oral", "Oral"),
        ("practical", "Practical"),
        ("assignment", "Assignment"),
        ("quiz", "Quiz"),
        ("summative", "Summative"),
    ]

    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name="strand_assessments")
    klass = models.ForeignKey(Class, on_delete=models.CASCADE)
    learning_area = models.ForeignKey(LearningArea, on_delete=models.CASCADE)
    strand_name = models.CharField(max_length=128)
    # "" when the assessment targets the whole strand
    sub_strand_name = models.CharField(max_length=128, blank=True, default="")
    assessment_type = models.CharField(max_length=32, choices=ASSESSMENT_TYPES, default="observation")
    performance_level = models.CharField(max_length=2, choices=PERFORMANCE_LEVEL_CHOICES)
    teacher_remarks = models.TextField(blank=True)
    term = models.CharField(max_length=2, choices=TERM_CHOICES)
    academic_year = models.CharField(max_length=16)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.student} - {self.strand_name} - {self.performance_level}"

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["student", "strand_name", "sub_strand_name", "term", "academic_year"],
                name="strandassessment_natural_key_uniq",
            ),
        ]
        indexes = [
            models.Index(fields=["klass", "term", "academic_year"], name="strand_class_term_idx"),
        ]


class Grade(models.Model):
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name="cbc_grades")
    klass = models.ForeignKey(Class, on_delete=models.CASCADE)
    learning_area = models.ForeignKey(LearningArea, on_delete=models.CASCADE)
    performance_level = models.CharField(max_length=2, choices=PERFORMANCE_LEVEL_CHOICES)
    performance_descriptor = models.TextField(blank=True)
    teacher_remarks = models.TextField(blank=True)
    term = models.CharField(max_length=2, choices=TERM_CHOICES)
    academic_year = models.CharField(max_length=16)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.student} - {self.learning_area} - {self.performance_level}"

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["student", "learning_area", "term", "academic_year"],
                name="grade_natural_key_uniq",
            ),
        ]
        indexes = [
            models.Index(fields=["klass", "term", "academic_year"], name="grade_class_term_idx"),
        ]


class AttendanceRecord(models.Model):
    STATUS_CHOICES = [
        ("present", "Present"),
        ("absent", "Absent"),
        ("late", "Late"),
        ("excused", "Excused"),
    ]

    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name="attendance")
    klass = models.ForeignKey(Class, on_delete=models.CASCADE)
    date = models.DateField()
    status = models.CharField(max_length=8, choices=STATUS_CHOICES)

    def __str__(self):
        return f"{self.student} - {self.date} - {self.status}"

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["student", "klass", "date"], name="attendance_student_day_uniq"),
        ]
