from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Subscription


@receiver(post_save, sender=Subscription)
def sync_premium_flag(sender, instance, **kwargs):
    """Keep User.is_premium / premium_expires_at in step with the subscription."""
    user = instance.user
    if instance.status == Subscription.Status.ACTIVE:
        user.is_premium = True
        user.premium_expires_at = instance.end_date
        user.save(update_fields=["is_premium", "premium_expires_at"])
    elif instance.status == Subscription.Status.EXPIRED:
        still_active = user.subscriptions.filter(status=Subscription.Status.ACTIVE).exclude(pk=instance.pk).exists()
        if not still_active:
            user.is_premium = False
            user.save(update_fields=["is_premium"])
    # CANCELLED keeps premium until end_date; expire_subscriptions clears it
