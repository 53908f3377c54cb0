from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="EntropyPool",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("domain", models.CharField(max_length=32, unique=True)),
                ("accumulator", models.CharField(default="0000000000000000000000000000000000000000000000000000000000000000", max_length=64)),
                ("draws", models.PositiveBigIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name="CallerNonce",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("domain", models.CharField(max_length=32)),
                ("caller", models.CharField(max_length=64)),
                ("value", models.PositiveBigIntegerField(default=0)),
            ],
            options={
                "unique_together": {("domain", "caller")},
            },
        ),
    ]
