import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from grading.services.taxonomy import ensure_school_taxonomy
from schools.models import School

logger = logging.getLogger(__name__)


@receiver(post_save, sender=School, dispatch_uid="grading_provision_school_taxonomy")
def provision_taxonomy_on_school_creation(sender, instance, created, raw=False, **kwargs):
    # fixtures load rows as-is
    if not created or raw:
        return
    if not ensure_school_taxonomy(instance):
        logger.warning("New school left without taxonomy", extra={"school_id": instance.id})
