from django.core.management.base import BaseCommand

from apps.orders.pricing import recalculate_all_order_totals


class Command(BaseCommand):
    help = "Recalculate order totals from their items, excluding refused lines"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Only show what would change",
        )

    def handle(self, *args, **options):
        dry_run = options["dry_run"]
        result = recalculate_all_order_totals(dry_run=dry_run, stdout=self.stdout)

        prefix = "[dry-run] " if dry_run else ""
        self.stdout.write(
            self.style.SUCCESS(
                f"{prefix}Processed: {result.processed}, updated: {result.updated}, "
                f"unchanged: {result.unchanged}, total difference: {result.difference:+.2f}"
            )
        )
