from django.core.management.base import BaseCommand, CommandError

from grading.services.taxonomy import provision_school_taxonomy
from schools.models import School


class Command(BaseCommand):
    help = "Create the default CBC performance descriptors and learning areas for schools that lack them."

    def add_arguments(self, parser):
        parser.add_argument(
            "--school-ids",
            nargs="+",
            type=int,
            dest="school_ids",
            help="IDs of the schools to provision.",
        )
        parser.add_argument(
            "--all",
            action="store_true",
            dest="all_schools",
            help="Provision every school.",
        )
        parser.add_argument(
            "--grade-level",
            dest="grade_level",
            default="Primary",
            help="Grade level recorded on newly created learning areas (default: Primary).",
        )

    def handle(self, *args, **options):
        school_ids = options.get("school_ids")
        if not school_ids and not options["all_schools"]:
            raise CommandError("Pass --school-ids or --all.")

        schools = School.objects.order_by("id")
        if school_ids:
            schools = schools.filter(id__in=school_ids)
            missing = set(school_ids) - set(schools.values_list("id", flat=True))
            if missing:
                raise CommandError(f"Unknown school ids: {', '.join(str(i) for i in sorted(missing))}")

        for school in schools:
            created = provision_school_taxonomy(school, grade_level=options["grade_level"])
            self.stdout.write(
                f"{school.name}: {created['descriptors']} descriptors, {created['learning_areas']} learning areas created."
            )
        self.stdout.write(self.style.SUCCESS("Taxonomy provisioned."))
