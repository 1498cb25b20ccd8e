import django.core.validators
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
            name="Founder",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(blank=True, max_length=255)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("linkedin_url", models.URLField(blank=True, max_length=500)),
                ("company_name", models.CharField(blank=True, max_length=255)),
                ("headline", models.CharField(blank=True, max_length=255)),
                ("idea_description", models.TextField(blank=True)),
                (
                    "stage",
                    models.CharField(
                        blank=True,
                        choices=[("idea", "Idea"), ("mvp", "MVP"), ("traction", "Traction"), ("scaling", "Scaling")],
                        max_length=20,
                    ),
                ),
                ("needs", models.JSONField(blank=True, default=list)),
                ("website", models.URLField(blank=True, max_length=500)),
                ("location", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True, null=True)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="founder_profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Mentor",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("current_role", models.CharField(blank=True, max_length=255)),
                ("company", models.CharField(blank=True, max_length=255)),
                ("linkedin_url", models.URLField(blank=True, max_length=500)),
                ("resume_url", models.URLField(blank=True, max_length=500)),
                ("total_experience_years", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("education_degree", models.CharField(blank=True, max_length=255)),
                ("education_college", models.CharField(blank=True, max_length=255)),
                ("specialization_tags", models.JSONField(blank=True, default=list)),
                ("expected_hourly_rate", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("expected_half_hour_rate", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("currency", models.CharField(default="INR", max_length=8)),
                ("timezone", models.CharField(default="Asia/Kolkata", max_length=64)),
                ("weekly_availability", models.JSONField(blank=True, default=list)),
                ("override_availability", models.JSONField(blank=True, default=list)),
                ("is_onboarded", models.BooleanField(db_index=True, default=False)),
                ("onboarded_at", models.DateTimeField(blank=True, null=True)),
                ("bio", models.TextField(blank=True)),
                ("location", models.CharField(blank=True, max_length=255)),
                ("mentoring_focus", models.TextField(blank=True)),
                ("ideal_mentee", models.TextField(blank=True)),
                ("languages", models.CharField(blank=True, max_length=255)),
                ("min_notice_hours", models.PositiveIntegerField(blank=True, null=True)),
                ("max_sessions_per_week", models.PositiveIntegerField(blank=True, null=True)),
                ("pre_session_notes_required", models.BooleanField(default=False)),
                ("allow_recording", models.BooleanField(default=False)),
                ("is_verified", models.BooleanField(default=False)),
                ("is_online", models.BooleanField(default=True)),
                ("avatar_url", models.URLField(blank=True, max_length=500)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True, null=True)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="mentor_profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Mentorship",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("mentor_id", models.CharField(db_index=True, max_length=191)),
                ("mentee_external_id", models.CharField(blank=True, db_index=True, max_length=191, null=True)),
                ("mentee_email", models.EmailField(blank=True, max_length=254, null=True)),
                ("mentee_name", models.CharField(default="Mentee", max_length=255)),
                ("goal", models.TextField(default="Career development")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("invited", "Invited"),
                            ("active", "Active"),
                            ("paused", "Paused"),
                            ("ended", "Ended"),
                        ],
                        default="active",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True, null=True)),
            ],
            options={
                "ordering": ["-updated_at", "-id"],
                "indexes": [
                    models.Index(fields=["mentor_id", "mentee_external_id"], name="mentorship_mentor_ext_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("mentor_id", "mentee_email"),
                        name="unique_mentorship_per_mentee_email",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Session",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("mentor_id", models.CharField(db_index=True, max_length=191)),
                ("student_id", models.CharField(blank=True, db_index=True, max_length=191)),
                ("student_email", models.EmailField(blank=True, max_length=254)),
                ("student_name", models.CharField(max_length=255)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("start_time", models.DateTimeField(db_index=True)),
                ("end_time", models.DateTimeField()),
                ("duration_minutes", models.PositiveIntegerField(default=0)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("scheduled", "Scheduled"),
                            ("ongoing", "Ongoing"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                            ("draft", "Draft"),
                        ],
                        default="scheduled",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("paid", "Paid"),
                            ("failed", "Failed"),
                            ("refunded", "Refunded"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "booking_type",
                    models.CharField(
                        choices=[("manual", "Manual"), ("paid", "Paid")],
                        default="manual",
                        max_length=20,
                    ),
                ),
                ("amount", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("currency", models.CharField(default="INR", max_length=8)),
                ("meeting_link", models.URLField(blank=True, max_length=500)),
                ("channel_name", models.CharField(blank=True, max_length=191)),
                ("order_id", models.CharField(blank=True, max_length=191)),
                ("payment_id", models.CharField(blank=True, max_length=191)),
                ("payment_signature", models.CharField(blank=True, max_length=255)),
                ("notes", models.TextField(blank=True)),
                ("recording_url", models.URLField(blank=True, max_length=500)),
                ("started_at", models.DateTimeField(blank=True, null=True)),
                ("ended_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True, null=True)),
            ],
            options={
                "ordering": ["start_time", "id"],
            },
        ),
        migrations.CreateModel(
            name="Student",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("full_name", models.CharField(blank=True, max_length=255)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("phone", models.CharField(blank=True, max_length=32)),
                ("linkedin_url", models.URLField(blank=True, max_length=500)),
                ("resume_file", models.CharField(blank=True, max_length=500)),
                ("educations", models.JSONField(blank=True, default=list)),
                ("experiences", models.JSONField(blank=True, default=list)),
                ("projects", models.JSONField(blank=True, default=list)),
                ("awards", models.TextField(blank=True)),
                ("links", models.JSONField(blank=True, default=dict)),
                ("skills", models.JSONField(blank=True, default=list)),
                ("location", models.JSONField(blank=True, default=dict)),
                ("availability", models.JSONField(blank=True, default=dict)),
                ("preferences", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True, null=True)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="student_profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="UserProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("external_id", models.CharField(max_length=191, unique=True)),
                ("display_name", models.CharField(blank=True, max_length=255)),
                (
                    "role",
                    models.CharField(
                        choices=[
                            ("unassigned", "Unassigned"),
                            ("mentor", "Mentor"),
                            ("student", "Student"),
                            ("founder", "Founder"),
                        ],
                        default="unassigned",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True, null=True)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="MenteePlan",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("mentor_id", models.CharField(db_index=True, max_length=191)),
                (
                    "progress",
                    models.PositiveSmallIntegerField(
                        default=0,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(100),
                        ],
                    ),
                ),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True, null=True)),
                (
                    "mentorship",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="plan",
                        to="core.mentorship",
                    ),
                ),
                (
                    "session",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="legacy_plan",
                        to="core.session",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Milestone",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField()),
                ("completed", models.BooleanField(default=False)),
                ("due_date", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True, null=True)),
                (
                    "plan",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="milestones",
                        to="core.menteeplan",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="MenteeMessage",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("mentor_id", models.CharField(db_index=True, max_length=191)),
                (
                    "sender",
                    models.CharField(
                        choices=[("mentor", "Mentor"), ("mentee", "Mentee"), ("system", "System")],
                        default="mentor",
                        max_length=10,
                    ),
                ),
                ("message", models.TextField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "mentorship",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="messages",
                        to="core.mentorship",
                    ),
                ),
                (
                    "session",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="legacy_messages",
                        to="core.session",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
            },
        ),
    ]
