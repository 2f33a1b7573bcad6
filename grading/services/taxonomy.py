"""
Baseline CBC taxonomy for a school: the four performance descriptors and a
starter set of learning areas.

Provisioning is an explicit, idempotent step (school creation, management
command, Celery task). Readers never provision; they fall back to the
in-memory defaults so grading is never blocked by a missing taxonomy.
"""
import logging
from typing import Dict, List

from django.db import DatabaseError, transaction

from grading.exceptions import UpstreamFetchError
from grading.services import store
from grading.services.levels import LEVEL_WEIGHTS
from schools.models import LearningArea, PerformanceDescriptor

logger = logging.getLogger(__name__)

DEFAULT_PERFORMANCE_DESCRIPTORS = (
    {
        "level_code": "EM",
        "level_name": "Emerging",
        "description": "Beginning to show understanding and skills",
        "color_code": "#EF4444",
    },
    {
        "level_code": "AP",
        "level_name": "Approaching Proficiency",
        "description": "Shows developing understanding with support needed",
        "color_code": "#F59E0B",
    },
    {
        "level_code": "PR",
        "level_name": "Proficient",
        "description": "Demonstrates good understanding and application",
        "color_code": "#3B82F6",
    },
    {
        "level_code": "AD",
        "level_name": "Advanced",
        "description": "Consistently demonstrates exceptional understanding and skills",
        "color_code": "#10B981",
    },
)

DEFAULT_LEARNING_AREAS = (
    {"code": "MATH", "name": "Mathematics", "description": "Mathematical concepts and problem solving"},
    {"code": "ENG", "name": "English", "description": "English language and literacy"},
    {"code": "SCI", "name": "Science", "description": "Scientific inquiry and understanding"},
    {"code": "KIS", "name": "Kiswahili", "description": "Lugha ya Kiswahili na fasihi"},
    {"code": "SST", "name": "Social Studies", "description": "Citizenship, history and geography"},
)


def builtin_descriptors() -> List[Dict]:
    return [dict(item, weight=LEVEL_WEIGHTS[item["level_code"]], is_default=True) for item in DEFAULT_PERFORMANCE_DESCRIPTORS]


def taxonomy_is_empty(school) -> bool:
    return (
        not PerformanceDescriptor.objects.filter(school=school).exists()
        or not LearningArea.objects.filter(school=school).exists()
    )


def provision_school_taxonomy(school, grade_level: str = "Primary") -> Dict[str, int]:
    """
    Create whatever default descriptors and learning areas the school lacks.
    Existing rows are left untouched, so running it twice is a no-op.
    """
    created = {"descriptors": 0, "learning_areas": 0}
    with transaction.atomic():
        for item in builtin_descriptors():
            _, was_created = PerformanceDescriptor.objects.get_or_create(
                school=school,
                level_code=item["level_code"],
                defaults={
                    "level_name": item["level_name"],
                    "weight": item["weight"],
                    "description": item["description"],
                    "color_code": item["color_code"],
                    "is_default": True,
                },
            )
            created["descriptors"] += int(was_created)
        for area in DEFAULT_LEARNING_AREAS:
            _, was_created = LearningArea.objects.get_or_create(
                school=school,
                code=area["code"],
                defaults={"name": area["name"], "description": area["description"], "grade_level": grade_level},
            )
            created["learning_areas"] += int(was_created)
    logger.info("Taxonomy provisioned", extra={"school_id": school.id, **created})
    return created


def ensure_school_taxonomy(school) -> bool:
    """Provision only when empty. Store failures are logged, never raised."""
    try:
        if not taxonomy_is_empty(school):
            return True
        provision_school_taxonomy(school)
        return True
    except DatabaseError as exc:
        logger.warning(
            "Taxonomy provisioning failed, grading will use built-in defaults",
            extra={"school_id": getattr(school, "id", None), "error": str(exc)},
        )
        return False


def get_performance_descriptors(school_id) -> Dict[str, Dict]:
    """Descriptors keyed by level code, built-in defaults filling any gap."""
    descriptors = {item["level_code"]: item for item in builtin_descriptors()}
    try:
        rows = store.fetch_performance_descriptors(school_id=school_id)
    except UpstreamFetchError:
        logger.warning("Descriptor fetch failed, using built-in defaults", extra={"school_id": school_id})
        return descriptors
    if not rows:
        logger.warning("No descriptors configured, using built-in defaults", extra={"school_id": school_id})
    for row in rows:
        descriptors[row.level_code] = {
            "level_code": row.level_code,
            "level_name": row.level_name,
            "weight": LEVEL_WEIGHTS[row.level_code],
            "description": row.description,
            "color_code": row.color_code,
            "is_default": row.is_default,
        }
    return descriptors
