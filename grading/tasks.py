import logging
import time

import redis
from celery import shared_task

from grading.exceptions import UpstreamFetchError
from grading.services.metrics import mark_batch_done
from grading.services.report_card import compile_report_cards
from grading.services.taxonomy import provision_school_taxonomy
from schools.models import School

logger = logging.getLogger(__name__)


@shared_task(bind=True, autoretry_for=(UpstreamFetchError,), retry_backoff=5, max_retries=3)
def compile_class_report_cards(self, class_id: int, term: str, academic_year: str, student_ids=None):
    logger.info(
        "Start compile_class_report_cards",
        extra={"class_id": class_id, "term": term, "academic_year": academic_year},
    )
    started = time.monotonic()
    result = compile_report_cards(class_id, term, academic_year, student_ids=student_ids)
    try:
        mark_batch_done(len(result.reports), len(result.failures), time.monotonic() - started)
    except redis.RedisError as exc:
        logger.warning("Unable to record batch metrics: %s", exc)
    return result.as_dict()


@shared_task
def provision_school_taxonomy_task(school_id: int):
    school = School.objects.filter(id=school_id).first()
    if not school:
        logger.warning("School not found for taxonomy provisioning", extra={"school_id": school_id})
        return None
    return provision_school_taxonomy(school)
