from django.db import migrations, models
import django.db.models.deletion


LEVEL_CHOICES = [("EM", "Emerging"), ("AP", "Approaching Proficiency"), ("PR", "Proficient"), ("AD", "Advanced")]
TERM_CHOICES = [("T1", "Term 1"), ("T2", "Term 2"), ("T3", "Term 3")]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="School",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("address", models.TextField(blank=True)),
                ("country", models.CharField(default="Kenya", max_length=64)),
                ("motto", models.CharField(blank=True, max_length=255)),
                ("academic_year", models.CharField(max_length=32)),
            ],
        ),
        migrations.CreateModel(
            name="Class",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=64)),
                ("level", models.CharField(max_length=64)),
                ("total_students", models.PositiveIntegerField(default=0)),
                ("school", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="schools.school")),
            ],
        ),
        migrations.CreateModel(
            name="Student",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("first_name", models.CharField(max_length=64)),
                ("last_name", models.CharField(max_length=64)),
                ("admission_number", models.CharField(max_length=64, unique=True)),
                ("klass", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="students", to="schools.class")),
            ],
        ),
        migrations.CreateModel(
            name="LearningArea",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=128)),
                ("code", models.CharField(max_length=16)),
                ("description", models.TextField(blank=True)),
                ("grade_level", models.CharField(blank=True, max_length=64)),
                ("school", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="learning_areas", to="schools.school")),
            ],
        ),
        migrations.CreateModel(
            name="PerformanceDescriptor",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("level_code", models.CharField(choices=LEVEL_CHOICES, max_length=2)),
                ("level_name", models.CharField(max_length=64)),
                ("weight", models.PositiveSmallIntegerField()),
                ("description", models.TextField(blank=True)),
                ("color_code", models.CharField(blank=True, max_length=7)),
                ("is_default", models.BooleanField(default=False)),
                ("school", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="performance_descriptors", to="schools.school")),
            ],
            options={"ordering": ["weight"]},
        ),
        migrations.CreateModel(
            name="StrandAssessment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("strand_name", models.CharField(max_length=128)),
                ("sub_strand_name", models.CharField(blank=True, default="", max_length=128)),
                (
                    "assessment_type",
                    models.CharField(
                        choices=[
                            ("observation", "Observation"),
                            ("project", "Project"),
                            ("oral", "Oral"),
                            ("practical", "Practical"),
                            ("assignment", "Assignment"),
                            ("quiz", "Quiz"),
                            ("summative", "Summative"),
                        ],
                        default="observation",
                        max_length=32,
                    ),
                ),
                ("performance_level", models.CharField(choices=LEVEL_CHOICES, max_length=2)),
                ("teacher_remarks", models.TextField(blank=True)),
                ("term", models.CharField(choices=TERM_CHOICES, max_length=2)),
                ("academic_year", models.CharField(max_length=16)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("klass", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="schools.class")),
                ("learning_area", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="schools.learningarea")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="strand_assessments", to="schools.student")),
            ],
        ),
        migrations.CreateModel(
            name="Grade",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("performance_level", models.CharField(choices=LEVEL_CHOICES, max_length=2)),
                ("performance_descriptor", models.TextField(blank=True)),
                ("teacher_remarks", models.TextField(blank=True)),
                ("term", models.CharField(choices=TERM_CHOICES, max_length=2)),
                ("academic_year", models.CharField(max_length=16)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("klass", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="schools.class")),
                ("learning_area", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="schools.learningarea")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="cbc_grades", to="schools.student")),
            ],
        ),
        migrations.CreateModel(
            name="AttendanceRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                (
                    "status",
                    models.CharField(
                        choices=[("present", "Present"), ("absent", "Absent"), ("late", "Late"), ("excused", "Excused")],
                        max_length=8,
                    ),
                ),
                ("klass", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="schools.class")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="attendance", to="schools.student")),
            ],
        ),
        migrations.AddConstraint(
            model_name="learningarea",
            constraint=models.UniqueConstraint(fields=("school", "code"), name="learningarea_school_code_uniq"),
        ),
        migrations.AddConstraint(
            model_name="performancedescriptor",
            constraint=models.UniqueConstraint(fields=("school", "level_code"), name="descriptor_school_level_uniq"),
        ),
        migrations.AddConstraint(
            model_name="strandassessment",
            constraint=models.UniqueConstraint(
                fields=("student", "strand_name", "sub_strand_name", "term", "academic_year"),
                name="strandassessment_natural_key_uniq",
            ),
        ),
        migrations.AddIndex(
            model_name="strandassessment",
            index=models.Index(fields=["klass", "term", "academic_year"], name="strand_class_term_idx"),
        ),
        migrations.AddConstraint(
            model_name="grade",
            constraint=models.UniqueConstraint(
                fields=("student", "learning_area", "term", "academic_year"),
                name="grade_natural_key_uniq",
            ),
        ),
        migrations.AddIndex(
            model_name="grade",
            index=models.Index(fields=["klass", "term", "academic_year"], name="grade_class_term_idx"),
        ),
        migrations.AddConstraint(
            model_name="attendancerecord",
            constraint=models.UniqueConstraint(fields=("student", "klass", "date"), name="attendance_student_day_uniq"),
        ),
    ]
