import uuid

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
            name="AccessEvent",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("location_id", models.CharField(db_index=True, max_length=64)),
                ("location_name", models.CharField(max_length=255)),
                ("location_ip", models.CharField(max_length=64)),
                ("latitude", models.FloatField(blank=True, null=True)),
                ("longitude", models.FloatField(blank=True, null=True)),
                ("accuracy", models.FloatField(blank=True, null=True)),
                ("access_time", models.DateTimeField(auto_now_add=True, db_index=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("success", "Success"),
                            ("failed", "Failed"),
                            ("timeout", "Timeout"),
                            ("denied", "Denied"),
                        ],
                        db_index=True,
                        default="success",
                        max_length=16,
                    ),
                ),
                ("session_id", models.CharField(blank=True, max_length=128, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="door_access_events",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "door_access_event",
                "indexes": [
                    models.Index(fields=["user", "access_time"], name="door_evt_user_time_idx"),
                    models.Index(fields=["location_id", "access_time"], name="door_evt_loc_time_idx"),
                    models.Index(fields=["user", "location_id", "access_time"], name="door_evt_user_loc_time_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("location_id", ""), _negated=True),
                        name="ck_door_access_location_id_not_empty",
                    ),
                ],
            },
        ),
    ]
