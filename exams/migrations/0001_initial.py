import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import exams.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Question",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("text", models.TextField()),
                ("explanation", models.TextField(blank=True)),
                ("question_type", models.CharField(choices=[("single", "Single choice"), ("multi", "Multi choice"), ("bool", "True/False")], default="single", max_length=12)),
                ("difficulty", models.CharField(choices=[("easy", "Easy"), ("medium", "Medium"), ("hard", "Hard")], default="medium", max_length=16)),
                ("is_active", models.BooleanField(default=True)),
                ("tags", models.JSONField(blank=True, default=list)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["difficulty"], name="exams_quest_difficu_8c1a2e_idx"),
                    models.Index(fields=["is_active"], name="exams_quest_is_acti_4f2b7d_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="QuestionOption",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("text", models.TextField()),
                ("is_correct", models.BooleanField(default=False)),
                ("order", models.PositiveIntegerField(default=0)),
                ("question", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="options", to="exams.question")),
            ],
            options={
                "ordering": ("order", "created_at"),
                "indexes": [models.Index(fields=["question", "order"], name="exams_quest_questio_5e9d0a_idx")],
            },
        ),
        migrations.CreateModel(
            name="Blueprint",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                ("duration_minutes", models.PositiveIntegerField(default=60, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(1440)])),
                ("mode", models.CharField(choices=[("practice", "Practice"), ("live", "Live")], default="practice", max_length=12)),
                ("test_type", models.CharField(blank=True, max_length=64)),
                ("year", models.PositiveIntegerField(blank=True, null=True)),
                ("max_attempts", models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ("start_at", models.DateTimeField(blank=True, null=True)),
                ("end_at", models.DateTimeField(blank=True, null=True)),
                ("randomize_section_order", models.BooleanField(default=False)),
                ("negative_marking_enabled", models.BooleanField(default=False)),
                ("negative_mark_value", models.DecimalField(decimal_places=3, default=exams.models._default_negative_mark, max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal("0")), django.core.validators.MaxValueValidator(Decimal("1"))])),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="blueprints_created", to=settings.AUTH_USER_MODEL)),
                ("updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="blueprints_updated", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ("-created_at",),
                "indexes": [
                    models.Index(fields=["mode"], name="exams_bluep_mode_3b7c1f_idx"),
                    models.Index(fields=["test_type", "year"], name="exams_bluep_test_ty_9a4e62_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="BlueprintQuestion",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("order", models.PositiveIntegerField(default=1)),
                ("marks", models.DecimalField(decimal_places=2, default=Decimal("1.00"), max_digits=6)),
                ("blueprint", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="flat_questions", to="exams.blueprint")),
                ("question", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="in_blueprints", to="exams.question")),
            ],
            options={
                "ordering": ("order", "created_at"),
                "unique_together": {("blueprint", "question")},
            },
        ),
        migrations.CreateModel(
            name="BlueprintVariant",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("code", models.CharField(max_length=16)),
                ("order", models.PositiveIntegerField(default=1)),
                ("negative_mark_value", models.DecimalField(blank=True, decimal_places=3, max_digits=5, null=True)),
                ("blueprint", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="variants", to="exams.blueprint")),
            ],
            options={
                "ordering": ("order", "code"),
                "unique_together": {("blueprint", "code")},
            },
        ),
        migrations.CreateModel(
            name="BlueprintSection",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(max_length=200)),
                ("order", models.PositiveIntegerField(default=1)),
                ("questions_to_select_from_pool", models.PositiveIntegerField(default=0)),
                ("pool_marks", models.DecimalField(decimal_places=2, default=Decimal("1.00"), max_digits=6)),
                ("randomize_question_order_in_section", models.BooleanField(default=False)),
                ("blueprint", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="sections", to="exams.blueprint")),
                ("variant", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="sections", to="exams.blueprintvariant")),
            ],
            options={
                "ordering": ("order", "created_at"),
                "indexes": [models.Index(fields=["blueprint", "variant", "order"], name="exams_bluep_bluepri_6d2f8b_idx")],
            },
        ),
        migrations.CreateModel(
            name="SectionQuestion",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("order", models.PositiveIntegerField(default=1)),
                ("marks", models.DecimalField(decimal_places=2, default=Decimal("1.00"), max_digits=6)),
                ("question", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="in_sections", to="exams.question")),
                ("section", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="questions", to="exams.blueprintsection")),
            ],
            options={
                "ordering": ("order", "created_at"),
                "unique_together": {("section", "question")},
            },
        ),
        migrations.CreateModel(
            name="SectionPoolEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("order", models.PositiveIntegerField(default=1)),
                ("marks", models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ("question", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="in_pools", to="exams.question")),
                ("section", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="pool_entries", to="exams.blueprintsection")),
            ],
            options={
                "ordering": ("order", "created_at"),
                "unique_together": {("section", "question")},
            },
        ),
        migrations.CreateModel(
            name="Attempt",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("variant_code", models.CharField(blank=True, max_length=16)),
                ("attempt_no", models.PositiveIntegerField(default=1)),
                ("status", models.CharField(choices=[("started", "Started"), ("submitted", "Submitted")], default="started", max_length=16)),
                ("started_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("score", models.DecimalField(blank=True, decimal_places=4, max_digits=12, null=True)),
                ("max_score", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=12)),
                ("percentage", models.IntegerField(blank=True, null=True)),
                ("time_taken_seconds", models.PositiveIntegerField(default=0)),
                ("blueprint", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="attempts", to="exams.blueprint")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="exam_attempts", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ("-started_at",),
                "indexes": [
                    models.Index(fields=["blueprint", "student"], name="exams_attem_bluepri_1c0e5a_idx"),
                    models.Index(fields=["student", "submitted_at"], name="exams_attem_student_7f3d92_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AttemptItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("order", models.PositiveIntegerField(default=1)),
                ("marks", models.DecimalField(decimal_places=2, default=Decimal("1.00"), max_digits=6)),
                ("section_title", models.CharField(blank=True, max_length=200)),
                ("attempt", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="exams.attempt")),
                ("question", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="attempt_items", to="exams.question")),
            ],
            options={
                "ordering": ("order",),
                "constraints": [models.UniqueConstraint(fields=("attempt", "question"), name="uq_attemptitem_attempt_question")],
            },
        ),
        migrations.CreateModel(
            name="AttemptResponse",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("selected_option_indices", models.JSONField(blank=True, default=list)),
                ("correct_option_indices", models.JSONField(blank=True, default=list)),
                ("is_correct", models.BooleanField(default=False)),
                ("earned_marks", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=10)),
                ("order", models.PositiveIntegerField(default=0)),
                ("attempt", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="responses", to="exams.attempt")),
                ("question", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="attempt_responses", to="exams.question")),
            ],
            options={
                "ordering": ("order",),
                "constraints": [models.UniqueConstraint(fields=("attempt", "question"), name="uq_attemptresponse_attempt_question")],
            },
        ),
    ]
