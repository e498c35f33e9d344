from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Counter",
            fields=[
                (
                    "key",
                    models.CharField(
                        help_text="Counter key, e.g. 'invoice:PW:2025'.",
                        max_length=191,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "seq",
                    models.PositiveBigIntegerField(
                        default=0,
                        help_text="Last value handed out. 0 means none yet.",
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "ksa_counters",
                "ordering": ["key"],
            },
        ),
    ]
