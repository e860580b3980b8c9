# accounting/management/commands/seed_starter_chart.py

from django.core.management.base import BaseCommand, CommandError

from accounting.services.chart_service import seed_starter_accounts
from tenants.models import Tenant


class Command(BaseCommand):
    help = "Seed the starter Chart of Accounts (and current/next fiscal years) for a tenant"

    def add_arguments(self, parser):
        parser.add_argument("--tenant", required=True, help="Tenant slug")

    def handle(self, *args, **options):
        slug = options["tenant"].strip()
        try:
            tenant = Tenant.objects.get(slug=slug)
        except Tenant.DoesNotExist as exc:
            raise CommandError(f"Tenant {slug!r} not found") from exc

        self.stdout.write(f"Seeding starter Chart of Accounts for {tenant.name}...")

        result = seed_starter_accounts(tenant_id=tenant.id)

        self.stdout.write(
            self.style.SUCCESS(
                f"✔ Starter chart seeded ({result['accounts_created']} new accounts, "
                f"{result['accounts_total']} total, "
                f"{len(result['fiscal_years_created'])} fiscal years created)."
            )
        )
