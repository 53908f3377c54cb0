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
            name="Bankroll",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("game", models.CharField(choices=[("coinflip", "Coin Flip"), ("wheel", "Wheel"), ("crash", "Crash")], max_length=16, unique=True)),
                ("held_balance", models.DecimalField(decimal_places=0, default=0, max_digits=38)),
                ("total_pending", models.DecimalField(decimal_places=0, default=0, max_digits=38)),
                ("global_total_bet", models.DecimalField(decimal_places=0, default=0, max_digits=38)),
                ("min_bet", models.DecimalField(decimal_places=0, default=100, max_digits=38)),
                ("max_bet", models.DecimalField(decimal_places=0, default=1000000, max_digits=38)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("owner", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="owned_bankrolls", to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name="PendingPrize",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=0, default=0, max_digits=38)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("bankroll", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="pending_prizes", to="bankroll.bankroll")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="pending_prizes", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "unique_together": {("bankroll", "user")},
            },
        ),
        migrations.CreateModel(
            name="PlayerStats",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("total_bet", models.DecimalField(decimal_places=0, default=0, max_digits=38)),
                ("total_won", models.DecimalField(decimal_places=0, default=0, max_digits=38)),
                ("total_lost", models.DecimalField(decimal_places=0, default=0, max_digits=38)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("bankroll", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="player_stats", to="bankroll.bankroll")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="game_stats", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name_plural": "player stats",
                "unique_together": {("bankroll", "user")},
            },
        ),
    ]
