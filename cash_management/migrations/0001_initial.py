from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


STATUS_CHOICES = [('paid', 'Paid'), ('unpaid', 'Unpaid'), ('partial', 'Partial')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='BankAccount',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, unique=True)),
                ('bank_name', models.CharField(blank=True, max_length=100)),
                ('currency', models.CharField(default='ETB', max_length=10)),
                ('balance', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('last_updated', models.DateTimeField(auto_now=True)),
            ],
            options={'ordering': ['name']},
        ),
        migrations.CreateModel(
            name='Payable',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('due_date', models.DateField()),
                ('paid_to', models.CharField(max_length=200)),
                ('purpose', models.CharField(max_length=255)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('paid', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('pending', models.DecimalField(decimal_places=2, default=0, editable=False, max_digits=14)),
                ('status', models.CharField(choices=STATUS_CHOICES, default='unpaid', max_length=10)),
                ('first_priority', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('second_priority', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('third_priority', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('remark', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={'ordering': ['due_date']},
        ),
        migrations.CreateModel(
            name='Receivable',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('due_date', models.DateField()),
                ('receivable_from', models.CharField(max_length=200)),
                ('purpose', models.CharField(max_length=255)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('bank', models.CharField(blank=True, max_length=100)),
                ('status', models.CharField(choices=STATUS_CHOICES, default='unpaid', max_length=10)),
                ('remark', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={'ordering': ['due_date']},
        ),
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(max_length=50)),
                ('model', models.CharField(max_length=100)),
                ('object_id', models.CharField(max_length=50)),
                ('note', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={'ordering': ['-created_at']},
        ),
        migrations.CreateModel(
            name='CashFlowTransaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField()),
                ('paid_to', models.CharField(blank=True, max_length=200)),
                ('received_from', models.CharField(blank=True, max_length=200)),
                ('description', models.TextField()),
                ('pv_number', models.CharField(blank=True, max_length=50)),
                ('cheque_number', models.CharField(blank=True, max_length=50)),
                ('fs_number', models.CharField(blank=True, max_length=50)),
                ('debit', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('credit', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('balance', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('bank_balance', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('remark', models.TextField(blank=True)),
                ('transaction_type', models.CharField(choices=[('deposit', 'Deposit'), ('withdrawal', 'Withdrawal'), ('transfer', 'Transfer')], default='deposit', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('bank', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to='cash_management.bankaccount')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='cash_transactions', to=settings.AUTH_USER_MODEL)),
            ],
            options={'ordering': ['date', 'id']},
        ),
    ]
