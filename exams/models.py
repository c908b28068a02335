from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from common.enums import AttemptStatus, BlueprintMode, Difficulty, QuestionType


def _default_negative_mark():
    return Decimal(str(getattr(settings, "BLUEPRINT_DEFAULT_NEGATIVE_MARK", "0.25")))


class TimeStampedModel(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


# ---------- Question store ----------

class Question(TimeStampedModel):
    text = models.TextField()
    explanation = models.TextField(blank=True)
    question_type = models.CharField(
        max_length=12, choices=QuestionType.choices, default=QuestionType.SINGLE_CHOICE
    )
    difficulty = models.CharField(max_length=16, choices=Difficulty.choices, default=Difficulty.MEDIUM)

    is_active = models.BooleanField(default=True)
    tags = models.JSONField(blank=True, default=list)

    class Meta:
        indexes = [
            models.Index(fields=["difficulty"], name="exams_quest_difficu_8c1a2e_idx"),
            models.Index(fields=["is_active"], name="exams_quest_is_acti_4f2b7d_idx"),
        ]

    def correct_option_indices(self) -> list[int]:
        """Zero-based positions (in display order) of the options flagged correct."""
        return [i for i, opt in enumerate(self.options.all()) if opt.is_correct]

    def __str__(self):
        return f"Q{self.pk}: {self.text[:60]}"


class QuestionOption(TimeStampedModel):
    question = models.ForeignKey(Question, on_delete=models.CASCADE, related_name="options")
    text = models.TextField()
    is_correct = models.BooleanField(default=False)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ("order", "created_at")
        indexes  = [models.Index(fields=["question", "order"], name="exams_quest_questio_5e9d0a_idx")]


# ---------- Blueprint ----------

class Blueprint(TimeStampedModel):
    """
    Reusable test definition. Exactly one content shape is active:
    flat ``flat_questions``, top-level ``sections`` (variant=NULL) or ``variants``.
    """
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)

    duration_minutes = models.PositiveIntegerField(
        default=60, validators=[MinValueValidator(1), MaxValueValidator(24 * 60)]
    )
    mode = models.CharField(max_length=12, choices=BlueprintMode.choices, default=BlueprintMode.PRACTICE)
    test_type = models.CharField(max_length=64, blank=True)
    year = models.PositiveIntegerField(null=True, blank=True)
    max_attempts = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])

    start_at = models.DateTimeField(null=True, blank=True)
    end_at   = models.DateTimeField(null=True, blank=True)

    randomize_section_order = models.BooleanField(default=False)
    negative_marking_enabled = models.BooleanField(default=False)
    negative_mark_value = models.DecimalField(
        max_digits=5, decimal_places=3, default=_default_negative_mark,
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("1"))],
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name="blueprints_created",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name="blueprints_updated",
    )

    class Meta:
        ordering = ("-created_at",)
        indexes = [
            models.Index(fields=["mode"], name="exams_bluep_mode_3b7c1f_idx"),
            models.Index(fields=["test_type", "year"], name="exams_bluep_test_ty_9a4e62_idx"),
        ]

    def clean(self):
        if self.start_at and self.end_at and self.start_at >= self.end_at:
            raise ValidationError("start_at must be earlier than end_at")

    def __str__(self):
        return self.title


class BlueprintQuestion(TimeStampedModel):
    blueprint = models.ForeignKey(Blueprint, on_delete=models.CASCADE, related_name="flat_questions")
    question  = models.ForeignKey(Question, on_delete=models.PROTECT, related_name="in_blueprints")
    order = models.PositiveIntegerField(default=1)
    marks = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal("1.00"))

    class Meta:
        unique_together = ("blueprint", "question")
        ordering = ("order", "created_at")


class BlueprintVariant(TimeStampedModel):
    blueprint = models.ForeignKey(Blueprint, on_delete=models.CASCADE, related_name="variants")
    code  = models.CharField(max_length=16)  # e.g. "A", "B"
    order = models.PositiveIntegerField(default=1)
    negative_mark_value = models.DecimalField(max_digits=5, decimal_places=3, null=True, blank=True)

    class Meta:
        unique_together = ("blueprint", "code")
        ordering = ("order", "code")

    def __str__(self):
        return f"{self.blueprint.title} · Set {self.code}"


class BlueprintSection(TimeStampedModel):
    blueprint = models.ForeignKey(Blueprint, on_delete=models.CASCADE, related_name="sections")
    variant   = models.ForeignKey(
        BlueprintVariant, on_delete=models.CASCADE, null=True, blank=True, related_name="sections"
    )
    title = models.CharField(max_length=200)
    order = models.PositiveIntegerField(default=1)

    questions_to_select_from_pool = models.PositiveIntegerField(default=0)
    pool_marks = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal("1.00"))
    randomize_question_order_in_section = models.BooleanField(default=False)

    class Meta:
        ordering = ("order", "created_at")
        indexes  = [models.Index(fields=["blueprint", "variant", "order"], name="exams_bluep_bluepri_6d2f8b_idx")]

    def __str__(self):
        return f"{self.blueprint.title} · {self.title}"


class SectionQuestion(TimeStampedModel):
    section  = models.ForeignKey(BlueprintSection, on_delete=models.CASCADE, related_name="questions")
    question = models.ForeignKey(Question, on_delete=models.PROTECT, related_name="in_sections")
    order = models.PositiveIntegerField(default=1)
    marks = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal("1.00"))

    class Meta:
        unique_together = ("section", "question")
        ordering = ("order", "created_at")


class SectionPoolEntry(TimeStampedModel):
    section  = models.ForeignKey(BlueprintSection, on_delete=models.CASCADE, related_name="pool_entries")
    question = models.ForeignKey(Question, on_delete=models.PROTECT, related_name="in_pools")
    order = models.PositiveIntegerField(default=1)
    marks = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)

    class Meta:
        unique_together = ("section", "question")
        ordering = ("order", "created_at")


# ---------- Attempts ----------

class Attempt(TimeStampedModel):
    blueprint = models.ForeignKey(Blueprint, on_delete=models.PROTECT, related_name="attempts")
    student   = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="exam_attempts")

    variant_code = models.CharField(max_length=16, blank=True)
    attempt_no = models.PositiveIntegerField(default=1)

    status = models.CharField(max_length=16, choices=AttemptStatus.choices, default=AttemptStatus.STARTED)
    started_at   = models.DateTimeField(default=timezone.now)
    submitted_at = models.DateTimeField(null=True, blank=True)

    score      = models.DecimalField(max_digits=12, decimal_places=4, null=True, blank=True)
    max_score  = models.DecimalField(max_digits=12, decimal_places=4, default=Decimal("0"))
    percentage = models.IntegerField(null=True, blank=True)
    time_taken_seconds = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ("-started_at",)
        indexes = [
            models.Index(fields=["blueprint", "student"], name="exams_attem_bluepri_1c0e5a_idx"),
            models.Index(fields=["student", "submitted_at"], name="exams_attem_student_7f3d92_idx"),
        ]

    @property
    def is_submitted(self) -> bool:
        return self.submitted_at is not None

    def clean(self):
        if self.submitted_at and self.submitted_at < self.started_at:
            raise ValidationError("submitted_at cannot be earlier than started_at")


class AttemptItem(TimeStampedModel):
    attempt  = models.ForeignKey(Attempt, on_delete=models.CASCADE, related_name="items")
    question = models.ForeignKey(Question, on_delete=models.PROTECT, related_name="attempt_items")
    order = models.PositiveIntegerField(default=1)
    marks = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal("1.00"))
    section_title = models.CharField(max_length=200, blank=True)

    class Meta:
        ordering = ("order",)
        constraints = [
            models.UniqueConstraint(fields=["attempt", "question"], name="uq_attemptitem_attempt_question"),
        ]


class AttemptResponse(TimeStampedModel):
    attempt  = models.ForeignKey(Attempt, on_delete=models.CASCADE, related_name="responses")
    question = models.ForeignKey(Question, on_delete=models.PROTECT, related_name="attempt_responses")

    selected_option_indices = models.JSONField(default=list, blank=True)
    correct_option_indices  = models.JSONField(default=list, blank=True)
    is_correct   = models.BooleanField(default=False)
    earned_marks = models.DecimalField(max_digits=10, decimal_places=4, default=Decimal("0"))
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ("order",)
        constraints = [
            models.UniqueConstraint(fields=["attempt", "question"], name="uq_attemptresponse_attempt_question"),
        ]
