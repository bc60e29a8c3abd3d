import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('competitions', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='PrizeType',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(choices=[('voucher_code', 'Voucher Code'), ('qr_code', 'QR Code'), ('url_link', 'URL Link'), ('discount_code', 'Discount Code'), ('wallet_credit', 'Wallet Credit'), ('physical', 'Physical')], max_length=20, unique=True)),
                ('name', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True, default='')),
                ('is_active', models.BooleanField(default=True)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='PrizePool',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True, default='')),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('competition', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='prize_pools', to='competitions.competition')),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Prize',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True, default='')),
                ('monetary_value', models.DecimalField(blank=True, decimal_places=2, help_text='Face value shown to the winner; informational only', max_digits=12, null=True)),
                ('total_quantity', models.PositiveIntegerField()),
                ('remaining_quantity', models.PositiveIntegerField()),
                ('expiry_date', models.DateTimeField(blank=True, help_text='No new awards after this moment', null=True)),
                ('image_url', models.URLField(blank=True, default='')),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('pool', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='prizes', to='prizes.prizepool')),
                ('prize_type', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='prizes', to='prizes.prizetype')),
            ],
            options={
                'ordering': ['id'],
                'indexes': [models.Index(fields=['pool', 'is_active'], name='prize_pool_active_idx')],
                'constraints': [models.CheckConstraint(condition=models.Q(('remaining_quantity__lte', models.F('total_quantity'))), name='prize_remaining_lte_total')],
            },
        ),
    ]
