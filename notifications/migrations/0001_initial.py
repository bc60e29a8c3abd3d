from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='SmsMessage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('phone', models.CharField(db_index=True, max_length=20)),
                ('body', models.TextField()),
                ('message_type', models.CharField(choices=[('otp', 'OTP'), ('prize_notification', 'Prize Notification'), ('redemption_confirmation', 'Redemption Confirmation'), ('reminder', 'Reminder')], max_length=30)),
                ('channel', models.CharField(choices=[('sms', 'SMS'), ('whatsapp', 'WhatsApp')], default='sms', max_length=10)),
                ('related_entity_type', models.CharField(blank=True, default='', help_text='e.g. prize_award, prize_redemption, otp', max_length=50)),
                ('related_entity_id', models.CharField(blank=True, default='', max_length=64)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('sent', 'Sent'), ('delivered', 'Delivered'), ('failed', 'Failed')], db_index=True, default='pending', max_length=10)),
                ('provider_reference', models.CharField(blank=True, default='', max_length=100)),
                ('failure_reason', models.TextField(blank=True, default='')),
                ('retry_count', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('sent_at', models.DateTimeField(blank=True, null=True)),
                ('delivered_at', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'verbose_name': 'SMS Message',
                'verbose_name_plural': 'SMS Messages',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'message_type'], name='sms_status_type_idx'),
                    models.Index(fields=['related_entity_type', 'related_entity_id'], name='sms_related_entity_idx'),
                ],
            },
        ),
    ]
