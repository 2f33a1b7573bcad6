import logging

import redis
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from grading.services.metrics import mark_queued
from grading.tasks import compile_class_report_cards
from schools.models import TERM_CHOICES, Class


class Command(BaseCommand):
    help = "Enqueue report card compilation for a class, split into student batches."

    def add_arguments(self, parser):
        parser.add_argument("--class-id", dest="class_id", type=int, required=True, help="Class to compile.")
        parser.add_argument(
            "--term",
            dest="term",
            required=True,
            choices=[c[0] for c in TERM_CHOICES],
            help="Term (T1, T2, T3).",
        )
        parser.add_argument("--academic-year", dest="academic_year", required=True, help="e.g. 2024 or 2024-2025.")
        parser.add_argument(
            "--batch-size",
            dest="batch_size",
            type=int,
            default=None,
            help="Students per task (default: CBC_REPORT_BATCH_SIZE).",
        )
        parser.add_argument(
            "--queue",
            dest="queue",
            default="grading",
            help="Celery queue to use (default: grading).",
        )
        parser.add_argument(
            "--student-ids",
            nargs="+",
            type=int,
            dest="student_ids",
            help="Restrict to these students (default: the whole class).",
        )

    def handle(self, *args, **options):
        class_id = options["class_id"]
        batch_size = options["batch_size"] or settings.CBC_REPORT_BATCH_SIZE
        if batch_size <= 0:
            raise CommandError("--batch-size must be positive.")

        klass = Class.objects.filter(id=class_id).first()
        if klass is None:
            raise CommandError(f"Class {class_id} not found.")

        students_qs = klass.students.order_by("id")
        if options.get("student_ids"):
            students_qs = students_qs.filter(id__in=options["student_ids"])
        student_ids = list(students_qs.values_list("id", flat=True))
        if not student_ids:
            self.stdout.write(self.style.WARNING("No students found."))
            return

        queue = options["queue"]
        self.stdout.write(
            f"Enqueue {len(student_ids)} report cards ({options['term']} {options['academic_year']}) "
            f"in batches of {batch_size} on queue '{queue}'"
        )
        batches = 0
        for offset in range(0, len(student_ids), batch_size):
            batch = student_ids[offset : offset + batch_size]
            try:
                mark_queued(len(batch))
            except redis.RedisError as exc:
                logging.getLogger(__name__).warning("Unable to record queued metrics: %s", exc)
            compile_class_report_cards.apply_async(
                args=[class_id, options["term"], options["academic_year"], batch],
                queue=queue,
            )
            batches += 1
            self.stdout.write(f"Batch {batches}: {len(batch)} students.")

        self.stdout.write(self.style.SUCCESS(f"Done. {batches} tasks enqueued."))
