import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="UserSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("default_currency", models.CharField(choices=[("BRL", "Brazilian Real"), ("USD", "US Dollar"), ("EUR", "Euro")], default="BRL", max_length=3)),
                ("date_format", models.CharField(choices=[("DD/MM/YYYY", "DD/MM/YYYY"), ("MM/DD/YYYY", "MM/DD/YYYY"), ("YYYY-MM-DD", "YYYY-MM-DD")], default="DD/MM/YYYY", max_length=10)),
                ("theme", models.CharField(choices=[("light", "Light"), ("dark", "Dark"), ("system", "System")], default="system", max_length=10)),
                ("language", models.CharField(choices=[("pt-BR", "Português (Brasil)"), ("en", "English")], default="pt-BR", max_length=5)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="settings", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name_plural": "User settings",
            },
        ),
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("type", models.CharField(choices=[("BANK", "Bank account"), ("CREDIT_CARD", "Credit card"), ("CASH", "Cash"), ("INVESTMENT", "Investment"), ("OTHER", "Other")], default="BANK", max_length=20)),
                ("balance", models.BigIntegerField(default=0, help_text="Projected balance in cents")),
                ("currency", models.CharField(default="BRL", max_length=3)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="accounts", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [models.Index(fields=["user", "name"], name="idx_account_user_name")],
            },
        ),
        migrations.CreateModel(
            name="Category",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("type", models.CharField(choices=[("INCOME", "Income"), ("EXPENSE", "Expense")], max_length=10)),
                ("icon", models.CharField(blank=True, default="", max_length=50)),
                ("color", models.CharField(blank=True, default="#6B7280", max_length=20)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="categories", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name_plural": "Categories",
                "ordering": ["type", "name"],
                "indexes": [models.Index(fields=["user", "type"], name="idx_category_user_type")],
            },
        ),
        migrations.CreateModel(
            name="Transaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(choices=[("INCOME", "Income"), ("EXPENSE", "Expense")], max_length=10)),
                ("amount", models.BigIntegerField(help_text="Positive magnitude in cents")),
                ("date", models.DateTimeField()),
                ("description", models.CharField(blank=True, default="", max_length=500)),
                ("is_recurring", models.BooleanField(default=False)),
                ("recurring_interval", models.CharField(blank=True, choices=[("DAILY", "Daily"), ("WEEKLY", "Weekly"), ("MONTHLY", "Monthly"), ("YEARLY", "Yearly")], max_length=10, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="transactions", to="finance.account")),
                ("category", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="transactions", to="finance.category")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="transactions", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-date", "-created_at"],
                "indexes": [
                    models.Index(fields=["user", "date"], name="idx_transaction_user_date"),
                    models.Index(fields=["user", "type"], name="idx_transaction_user_type"),
                    models.Index(fields=["account", "date"], name="idx_account_date"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount__gt", 0)), name="transaction_amount_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SavingsBox",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("current_amount", models.BigIntegerField(default=0, help_text="Balance in cents")),
                ("target_amount", models.BigIntegerField(blank=True, help_text="Optional target in cents", null=True)),
                ("color", models.CharField(default="#3B82F6", max_length=20)),
                ("icon", models.CharField(default="piggy-bank", max_length=50)),
                ("status", models.CharField(choices=[("active", "Active"), ("inactive", "Inactive")], default="active", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="savings_boxes", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name_plural": "Savings boxes",
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["user", "status"], name="idx_savingsbox_user_status")],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("current_amount__gte", 0)), name="savings_box_amount_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SavingsTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(choices=[("DEPOSIT", "Deposit"), ("WITHDRAW", "Withdraw"), ("TRANSFER", "Transfer")], max_length=10)),
                ("amount", models.BigIntegerField(help_text="Positive magnitude in cents")),
                ("description", models.CharField(blank=True, default="", max_length=500)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("ledger_transaction", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="savings_movements", to="finance.transaction")),
                ("savings_box", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="transactions", to="finance.savingsbox")),
                ("source_account", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="savings_transactions", to="finance.account")),
                ("target_box", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="incoming_transfers", to="finance.savingsbox")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="savings_transactions", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["user", "type"], name="idx_savingstx_user_type")],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount__gt", 0)), name="savings_transaction_amount_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="FinancialGoal",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("target_amount", models.BigIntegerField(help_text="Target in cents")),
                ("current_amount", models.BigIntegerField(default=0, help_text="Progress in cents")),
                ("start_date", models.DateField()),
                ("target_date", models.DateField(blank=True, null=True)),
                ("is_completed", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("account", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="goals", to="finance.account")),
                ("category", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="goals", to="finance.category")),
                ("savings_box", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.RESTRICT, related_name="goals", to="finance.savingsbox")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="goals", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["is_completed", "target_date", "-created_at"],
                "indexes": [models.Index(fields=["user", "is_completed"], name="idx_goal_user_completed")],
            },
        ),
        migrations.CreateModel(
            name="Investment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("category", models.CharField(choices=[("renda_fixa", "Renda Fixa"), ("acoes", "Ações"), ("fundos", "Fundos"), ("fiis", "FIIs"), ("criptomoedas", "Criptomoedas"), ("commodities", "Commodities"), ("internacional", "Internacional"), ("previdencia", "Previdência"), ("outros", "Outros")], max_length=20)),
                ("description", models.TextField(blank=True, default="")),
                ("initial_amount", models.BigIntegerField(help_text="Amount invested in cents")),
                ("current_amount", models.BigIntegerField(help_text="Current value in cents")),
                ("target_amount", models.BigIntegerField(blank=True, null=True)),
                ("investment_date", models.DateField()),
                ("color", models.CharField(blank=True, default="", max_length=20)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="investments", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-investment_date", "-created_at"],
                "indexes": [models.Index(fields=["user", "category"], name="idx_investment_user_cat")],
            },
        ),
        migrations.CreateModel(
            name="InvestmentTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(choices=[("aporte", "Aporte"), ("resgate", "Resgate"), ("rendimento", "Rendimento"), ("taxa", "Taxa")], max_length=12)),
                ("amount", models.BigIntegerField(help_text="Positive magnitude in cents")),
                ("description", models.CharField(blank=True, default="", max_length=500)),
                ("transaction_date", models.DateField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("investment", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="transactions", to="finance.investment")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="investment_transactions", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-transaction_date", "-created_at"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount__gt", 0)), name="investment_transaction_amount_positive"),
                ],
            },
        ),
    ]
