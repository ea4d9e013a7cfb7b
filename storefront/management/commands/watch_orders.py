"""Watch Orders Management Command"""

import logging
import time

from django.core.management.base import BaseCommand

from core.subscriptions import subscribe
from storefront.models import Order
from storefront.shop.pricing import format_price

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Streams the live order list (newest first) to the console"

    def add_arguments(self, parser):
        parser.add_argument(
            "--interval",
            type=float,
            default=5.0,
            help="Seconds between checks for orders written by other processes",
        )
        parser.add_argument(
            "--status",
            default="",
            help="Only show orders with this status",
        )
        parser.add_argument(
            "--once",
            action="store_true",
            help="Print the current list and exit",
        )

    def handle(self, *args, **options):
        queryset = Order.objects.all()
        if options["status"]:
            queryset = queryset.filter(status__iexact=options["status"])

        subscription = subscribe(Order, self.render, ordering=("-created_at",), queryset=queryset)
        try:
            if options["once"]:
                return
            while True:
                time.sleep(options["interval"])
                subscription.refresh()
        except KeyboardInterrupt:
            self.stdout.write(self.style.WARNING("Stopped watching orders"))
        finally:
            subscription.cancel()

    def render(self, orders):
        self.stdout.write(self.style.MIGRATE_HEADING(f"{len(orders)} order(s)"))
        for order in orders:
            self.stdout.write(
                f"#{order.pk:<6} {order.created_at:%Y-%m-%d %H:%M}  "
                f"{order.customer_name or '-':<24} {format_price(order.total):>12}  {order.status}"
            )
