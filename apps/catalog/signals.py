from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .cache import get_provider_cache
from .models import Provider


@receiver(post_save, sender=Provider)
@receiver(post_delete, sender=Provider)
def invalidate_provider_cache(sender, **kwargs):
    get_provider_cache().invalidate()
