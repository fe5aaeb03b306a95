from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from accounts.models import Notification, Subscription, User
from accounts.notifications import notify


class Command(BaseCommand):
    help = "Expire subscriptions past their end date and clear lapsed premium flags"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report what would change without writing anything",
        )

    def handle(self, *args, **options):
        now = timezone.now()
        dry_run = options["dry_run"]

        lapsed = Subscription.objects.filter(
            status__in=[Subscription.Status.ACTIVE, Subscription.Status.CANCELLED],
            end_date__lt=now,
        ).select_related("user")

        expired = 0
        for subscription in lapsed:
            self.stdout.write(f"  {subscription.user.email}: {subscription.plan} ended {subscription.end_date:%Y-%m-%d}")
            if dry_run:
                continue
            with transaction.atomic():
                subscription.status = Subscription.Status.EXPIRED
                subscription.save(update_fields=["status"])
                notify(
                    subscription.user,
                    Notification.Kind.SYSTEM_ALERT,
                    "Premium expired",
                    "Your premium subscription has ended. Renew to keep premium features.",
                    action_url="/subscription",
                )
            expired += 1

        # Flags left behind without a subscription row (e.g. set by hand in the admin)
        stale = User.objects.filter(is_premium=True, premium_expires_at__lt=now)
        stale_count = stale.count()
        if not dry_run:
            stale.update(is_premium=False)

        verb = "Would expire" if dry_run else "Expired"
        self.stdout.write(self.style.SUCCESS(
            f"{verb} {expired if not dry_run else lapsed.count()} subscription(s); "
            f"{stale_count} premium flag(s) {'to clear' if dry_run else 'cleared'}."
        ))
