import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="CheckInDocument",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("owner_uid", models.CharField(db_index=True, max_length=128)),
                ("record_id", models.CharField(max_length=64)),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("mood", models.CharField(blank=True, max_length=16, null=True)),
                ("note", models.TextField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-date"],
            },
        ),
        migrations.CreateModel(
            name="DevotionDocument",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("owner_uid", models.CharField(db_index=True, max_length=128)),
                ("record_id", models.CharField(max_length=64)),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("scripture", models.JSONField(default=list)),
                ("observation", models.TextField(blank=True, default="")),
                ("application", models.TextField(blank=True, default="")),
                ("prayer_text", models.TextField(blank=True, default="")),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-date"],
            },
        ),
        migrations.AddConstraint(
            model_name="checkindocument",
            constraint=models.UniqueConstraint(fields=("owner_uid", "record_id"), name="unique_checkin_per_owner"),
        ),
        migrations.AddConstraint(
            model_name="devotiondocument",
            constraint=models.UniqueConstraint(fields=("owner_uid", "record_id"), name="unique_devotion_per_owner"),
        ),
    ]
