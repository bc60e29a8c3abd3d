import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounts', '0001_initial'),
        ('competitions', '0001_initial'),
        ('prizes', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='PrizeAward',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('phone', models.CharField(help_text='Winning cell number; owns the award', max_length=20)),
                ('awarded_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('awarded_by', models.CharField(blank=True, default='', help_text='Id of the staff user who made the award', max_length=150)),
                ('method', models.CharField(choices=[('manual', 'Manual'), ('bulk', 'Bulk'), ('auto', 'Auto')], default='manual', max_length=10)),
                ('notification_channel', models.CharField(blank=True, choices=[('sms', 'SMS'), ('whatsapp', 'WhatsApp')], default='sms', max_length=10)),
                ('notification_status', models.CharField(choices=[('pending', 'Pending'), ('sent', 'Sent'), ('failed', 'Failed'), ('not_required', 'Not Required')], default='pending', max_length=15)),
                ('status', models.CharField(choices=[('awarded', 'Awarded'), ('redeemed', 'Redeemed'), ('expired', 'Expired'), ('cancelled', 'Cancelled')], db_index=True, default='awarded', max_length=10)),
                ('expiry_date', models.DateTimeField(blank=True, null=True)),
                ('external_reference', models.CharField(blank=True, default='', max_length=100)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('cancelled_by', models.CharField(blank=True, default='', max_length=150)),
                ('cancel_reason', models.TextField(blank=True, default='')),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('competition', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='awards', to='competitions.competition')),
                ('external_user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='awards', to='accounts.externaluser')),
                ('prize', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='awards', to='prizes.prize')),
            ],
            options={
                'ordering': ['-awarded_at'],
                'indexes': [models.Index(fields=['phone', 'status'], name='award_phone_status_idx')],
            },
        ),
    ]
