import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("fuel_tracker", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="FavoriteRoute",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("profile", models.CharField(db_index=True, max_length=100)),
                ("departure_label", models.CharField(max_length=300)),
                ("destination_label", models.CharField(max_length=300)),
                ("consumption_l_per_100km", models.FloatField(blank=True, null=True)),
                ("fuel_kind", models.CharField(blank=True, default="", max_length=10)),
                ("added_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "ordering": ("added_at", "id"),
            },
        ),
        migrations.CreateModel(
            name="UserPreferences",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("profile", models.CharField(max_length=100, unique=True)),
                ("default_fuel_kind", models.CharField(max_length=10)),
                ("default_consumption", models.FloatField(blank=True, null=True)),
                ("language", models.CharField(max_length=5)),
                ("units", models.CharField(max_length=10)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ("profile",),
                "verbose_name_plural": "user preferences",
            },
        ),
    ]
