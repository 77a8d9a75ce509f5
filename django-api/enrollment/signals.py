"""Django signals for cache invalidation.

Program detail responses embed the offering, so saving either one drops the
cached program entries.
"""

from django.core.cache import cache
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from enrollment.cache_keys import program_cache_key
from enrollment.models import Offering, Program


@receiver([post_save, post_delete], sender=Program)
def invalidate_program_cache(sender, instance, **kwargs):
    """Invalidate the cached detail when a program is saved or deleted."""
    cache.delete(program_cache_key(str(instance.pk)))


@receiver([post_save, post_delete], sender=Offering)
def invalidate_offering_cache(sender, instance, **kwargs):
    """Invalidate every cached program of an offering when it is saved or deleted."""
    program_ids = Program.objects.filter(offering_id=instance.pk).values_list("pk", flat=True)
    cache.delete_many([program_cache_key(str(program_id)) for program_id in program_ids])
