from django.core.management.base import BaseCommand
from django.db import transaction
from django.db.models import Sum
from decimal import Decimal
from backend.parties.models import Supplier
from backend.parties.services import supplier_purchases


class Command(BaseCommand):
    help = 'Recomputes supplier debts from credit purchases and payments'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Perform a dry run without saving changes',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN MODE: No changes will be saved."))

        suppliers = Supplier.objects.all()
        self.stdout.write(f"Starting debt repair for {suppliers.count()} suppliers...")

        with transaction.atomic():
            for s in suppliers:
                credit = supplier_purchases(s).filter(purchase_type='credit').aggregate(
                    total=Sum('total_amount'))['total'] or Decimal('0.00')
                paid = s.payments.aggregate(total=Sum('amount'))['total'] or Decimal('0.00')
                new_debt = credit - paid

                if s.total_debt != new_debt:
                    self.stdout.write(self.style.SUCCESS(f"  - {s.name}: {s.total_debt} -> {new_debt}"))
                    if not dry_run:
                        Supplier.objects.filter(pk=s.pk).update(total_debt=new_debt)
                else:
                    self.stdout.write(f"  - {s.name}: correct ({new_debt})")

            if dry_run:
                self.stdout.write(self.style.WARNING("\nDry run complete. Rolling back changes."))
                transaction.set_rollback(True)
            else:
                self.stdout.write(self.style.SUCCESS("\nDebt repair complete and committed."))
