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
            name="Round",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("round_id", models.PositiveBigIntegerField(unique=True)),
                ("start_time", models.DateTimeField()),
                ("betting_ends_at", models.DateTimeField()),
                ("crash_multiplier", models.PositiveIntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-round_id"],
            },
        ),
        migrations.CreateModel(
            name="CrashBet",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("bet_amount", models.DecimalField(decimal_places=0, max_digits=38)),
                ("auto_cashout", models.PositiveIntegerField()),
                ("won", models.BooleanField(default=False)),
                ("payout", models.DecimalField(decimal_places=0, default=0, max_digits=38)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("round", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="bets", to="crash.round")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [models.Index(fields=["round", "user"], name="crash_bet_round_user_idx")],
            },
        ),
    ]
