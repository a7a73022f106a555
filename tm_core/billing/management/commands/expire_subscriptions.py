# tm_core/billing/management/commands/expire_subscriptions.py
from __future__ import annotations

from django.core.management.base import BaseCommand

from tm_core.billing.services import SubscriptionService


class Command(BaseCommand):
    help = "Mark active subscriptions whose end_date has passed as expired."

    def handle(self, *args, **options):
        count = SubscriptionService.expire_lapsed()
        self.stdout.write(self.style.SUCCESS(f"Expired {count} subscription(s)."))
