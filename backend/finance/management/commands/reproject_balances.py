from django.core.management.base import BaseCommand, CommandError

from finance.models import Account
from finance.services.balance_projector import BalanceProjector


class Command(BaseCommand):
    help = "Audit projected account balances against the ledger and repair drift"

    def add_arguments(self, parser):
        parser.add_argument(
            "--user-id",
            type=int,
            help="Only accounts owned by this user",
        )
        parser.add_argument(
            "--account-id",
            type=int,
            help="Only this account",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report drift without writing balances",
        )

    def handle(self, *args, **options):
        accounts = Account.objects.order_by("id")
        if options.get("user_id"):
            accounts = accounts.filter(user_id=options["user_id"])
        if options.get("account_id"):
            accounts = accounts.filter(pk=options["account_id"])
            if not accounts.exists():
                raise CommandError(f"Account {options['account_id']} does not exist")

        self.stdout.write(f"Checking {accounts.count()} account(s)")

        drifted = 0
        failed = 0
        for account in accounts.iterator():
            report = BalanceProjector.audit_account(account)
            if not report["drift"]:
                continue

            drifted += 1
            self.stdout.write(
                self.style.WARNING(
                    f"Account {account.id} ({account.name}): stored "
                    f"{report['stored']} projected {report['projected']} "
                    f"drift {report['drift']}"
                )
            )
            if options["dry_run"]:
                continue

            if BalanceProjector.reproject_account(account) is None:
                failed += 1
                self.stdout.write(self.style.ERROR(f"   ↳ Repair failed for {account.id}"))
            else:
                self.stdout.write(f"   ↳ Repaired: balance {account.balance}")

        # Summary
        self.stdout.write("\n" + "=" * 50)
        if not drifted:
            self.stdout.write(self.style.SUCCESS("All balances match the ledger"))
        elif options["dry_run"]:
            self.stdout.write(
                self.style.WARNING(
                    f"Found {drifted} drifted account(s); run without --dry-run to repair"
                )
            )
        elif failed:
            self.stdout.write(
                self.style.ERROR(f"Repaired {drifted - failed}, failed {failed}")
            )
        else:
            self.stdout.write(self.style.SUCCESS(f"Repaired {drifted} account(s)"))
