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
            name="WheelGame",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("bet_amount", models.DecimalField(decimal_places=0, max_digits=38)),
                ("result_segment", models.IntegerField()),
                ("multiplier_tenths", models.IntegerField()),
                ("payout", models.DecimalField(decimal_places=0, default=0, max_digits=38)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-id"],
            },
        ),
        migrations.CreateModel(
            name="LastSpin",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("outcome_index", models.IntegerField(default=0)),
                ("multiplier_tenths", models.IntegerField(default=0)),
                ("won", models.BooleanField(default=False)),
                ("amount", models.DecimalField(decimal_places=0, default=0, max_digits=38)),
                ("nonce", models.PositiveBigIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="last_spin", to=settings.AUTH_USER_MODEL)),
            ],
        ),
    ]
