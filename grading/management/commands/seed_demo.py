import random
from datetime import date, timedelta

from django.core.management.base import BaseCommand
from django.db import transaction

from grading.services import store
from grading.services.levels import PERFORMANCE_LEVELS
from grading.services.taxonomy import provision_school_taxonomy
from schools.models import AttendanceRecord, Class, LearningArea, School, StrandAssessment, Student

DEMO_STRANDS = {
    "MATH": ["Number and Place Value", "Addition and Subtraction", "Fractions", "Geometry"],
    "ENG": ["Reading", "Writing", "Speaking and Listening", "Grammar and Vocabulary"],
    "SCI": ["Scientific Inquiry", "Life Processes", "Materials and their Properties"],
    "KIS": ["Kusoma", "Kuandika", "Sarufi na Msamiati"],
    "SST": ["Citizenship", "Our Environment", "History of Kenya"],
}

DEMO_STUDENTS = [
    "Amani Otieno",
    "Wanjiru Kamau",
    "Baraka Mwangi",
    "Achieng Odhiambo",
    "Kipchoge Rotich",
    "Njeri Wambui",
    "Juma Hassan",
    "Zawadi Chebet",
]

ASSESSMENT_TYPES = [c[0] for c in StrandAssessment.ASSESSMENT_TYPES]


class Command(BaseCommand):
    help = "Populate the database with a demo CBC school (one class, one term). Safe to run twice."

    def add_arguments(self, parser):
        parser.add_argument("--term", dest="term", default="T1", help="Term to seed (default: T1).")
        parser.add_argument("--academic-year", dest="academic_year", default="2025", help="Academic year (default: 2025).")
        parser.add_argument("--seed", dest="seed", type=int, default=None, help="Random seed for reproducible data.")

    def handle(self, *args, **options):
        rng = random.Random(options["seed"])
        term = options["term"]
        academic_year = options["academic_year"]

        with transaction.atomic():
            school, _ = School.objects.get_or_create(
                name="Mwangaza Primary School",
                defaults={
                    "address": "Ngong Road, Nairobi",
                    "country": "Kenya",
                    "motto": "Elimu ni Mwanga",
                    "academic_year": academic_year,
                },
            )
            provision_school_taxonomy(school)

            klass, _ = Class.objects.get_or_create(
                school=school,
                name="Grade 4 East",
                defaults={"level": "Grade 4", "total_students": len(DEMO_STUDENTS)},
            )

            areas = {area.code: area for area in LearningArea.objects.filter(school=school, code__in=DEMO_STRANDS)}
            students = []
            for idx, full_name in enumerate(DEMO_STUDENTS, start=1):
                first, last = full_name.split(" ", 1)
                student, _ = Student.objects.get_or_create(
                    admission_number=f"MPS-{academic_year}-{idx:03d}",
                    defaults={"first_name": first, "last_name": last, "klass": klass},
                )
                students.append(student)

            for student in students:
                # each learner hovers around a base level so the dashboard shows a spread
                base = rng.randint(1, 4)
                for code, strands in DEMO_STRANDS.items():
                    area = areas.get(code)
                    if area is None:
                        continue
                    for strand in strands:
                        level = PERFORMANCE_LEVELS[max(0, min(3, base - 1 + rng.choice([-1, 0, 0, 1])))]
                        store.upsert_strand_assessment(
                            {
                                "student_id": student.id,
                                "class_id": klass.id,
                                "subject_id": area.id,
                                "strand_name": strand,
                                "assessment_type": rng.choice(ASSESSMENT_TYPES),
                                "performance_level": level,
                                "teacher_remarks": "",
                                "term": term,
                                "academic_year": academic_year,
                            }
                        )
                    store.upsert_grade(
                        {
                            "student_id": student.id,
                            "class_id": klass.id,
                            "subject_id": area.id,
                            "performance_level": PERFORMANCE_LEVELS[base - 1],
                            "teacher_remarks": rng.choice(["Keep it up.", "Good progress.", "Needs more practice."]),
                            "term": term,
                            "academic_year": academic_year,
                        }
                    )

                start = date(int(academic_year[:4]), 1, 8)
                for day in range(20):
                    AttendanceRecord.objects.update_or_create(
                        student=student,
                        date=start + timedelta(days=day),
                        defaults={"klass": klass, "status": rng.choice(["present"] * 8 + ["absent", "late"])},
                    )

        self.stdout.write(self.style.SUCCESS(f"Demo data ready: {school.name}, {klass.name}, {len(students)} students."))
