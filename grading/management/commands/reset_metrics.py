import redis
from django.core.management.base import BaseCommand, CommandError

from grading.services.metrics import reset_metrics


class Command(BaseCommand):
    help = "Reset the Redis counters behind the report card metrics feed."

    def handle(self, *args, **options):
        try:
            reset_metrics()
        except redis.RedisError as exc:
            raise CommandError(f"Redis unavailable: {exc}") from exc
        self.stdout.write(self.style.SUCCESS("Metrics reset."))
