import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("service_orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Result",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("received_at", models.DateTimeField()),
                ("performed_at", models.DateTimeField()),
                ("delivered_at", models.DateTimeField()),
                ("result_text", models.TextField()),
                ("conclusion", models.TextField()),
                ("note", models.CharField(blank=True, max_length=1000, null=True)),
                ("url", models.CharField(blank=True, max_length=255, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "detail",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="result",
                        to="service_orders.serviceorderdetail",
                    ),
                ),
            ],
            options={
                "db_table": "results",
                "ordering": ["-delivered_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="ResultDetail",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("indicator", models.CharField(max_length=255)),
                ("value", models.CharField(max_length=255)),
                ("is_abnormal", models.BooleanField(default=False)),
                (
                    "result",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="measurement",
                        to="results.result",
                    ),
                ),
            ],
            options={
                "db_table": "result_details",
                "ordering": ["id"],
            },
        ),
    ]
