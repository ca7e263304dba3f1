import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="License",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("key", models.CharField(db_index=True, max_length=64, unique=True)),
                ("hwid", models.CharField(blank=True, max_length=128, null=True)),
                ("expiry_days", models.PositiveIntegerField()),
                (
                    "edition",
                    models.CharField(
                        choices=[("BASIC", "Basic"), ("PRO", "Pro"), ("ENTERPRISE", "Enterprise")],
                        default="BASIC",
                        max_length=32,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("ACTIVE", "Active"), ("REVOKED", "Revoked")],
                        default="ACTIVE",
                        max_length=16,
                    ),
                ),
                ("server_revision", models.PositiveIntegerField(default=1)),
                ("created_at", models.DateTimeField()),
                ("last_seen", models.DateTimeField(blank=True, null=True)),
                ("owner_email", models.EmailField(blank=True, max_length=255, null=True)),
                ("notes", models.CharField(blank=True, max_length=500, null=True)),
            ],
            options={
                "db_table": "licenses",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="licenses_status_idx"),
                    models.Index(fields=["edition"], name="licenses_edition_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LicenseUsageLog",
            fields=[
                (
                    "id",
                    models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False),
                ),
                ("license_key", models.CharField(db_index=True, max_length=64)),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("CREATE", "Create"),
                            ("ACTIVATE", "Activate"),
                            ("RENEW", "Renew"),
                            ("UPGRADE", "Upgrade"),
                            ("REVOKE", "Revoke"),
                            ("SYNC", "Sync"),
                        ],
                        max_length=50,
                    ),
                ),
                ("outcome", models.CharField(max_length=32)),
                ("hwid", models.CharField(blank=True, max_length=128, null=True)),
                ("old_edition", models.CharField(blank=True, max_length=32, null=True)),
                ("new_edition", models.CharField(blank=True, max_length=32, null=True)),
                ("old_expiry_days", models.IntegerField(blank=True, null=True)),
                ("new_expiry_days", models.IntegerField(blank=True, null=True)),
                ("server_revision", models.IntegerField(blank=True, null=True)),
                ("ip_address", models.CharField(blank=True, max_length=64, null=True)),
                ("user_agent", models.CharField(blank=True, max_length=500, null=True)),
                ("actor", models.CharField(blank=True, max_length=255, null=True)),
                ("notes", models.CharField(blank=True, max_length=500, null=True)),
                ("created_at", models.DateTimeField()),
            ],
            options={
                "db_table": "license_usage_logs",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["license_key", "created_at"], name="usage_logs_key_created_idx"),
                    models.Index(fields=["action"], name="usage_logs_action_idx"),
                ],
            },
        ),
    ]
