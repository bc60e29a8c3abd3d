import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('awards', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='PrizeRedemption',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('redemption_code', models.CharField(max_length=20, unique=True)),
                ('redeemed_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('channel', models.CharField(choices=[('web_portal', 'Web Portal'), ('kiosk', 'Kiosk'), ('api', 'API'), ('pos', 'POS')], default='web_portal', max_length=15)),
                ('from_ip', models.GenericIPAddressField(blank=True, null=True)),
                ('status', models.CharField(choices=[('completed', 'Completed')], default='completed', max_length=15)),
                ('notes', models.TextField(blank=True, default='')),
                ('award', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='redemption', to='awards.prizeaward')),
            ],
            options={
                'ordering': ['-redeemed_at'],
            },
        ),
    ]
