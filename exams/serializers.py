# exams/serializers.py
from decimal import Decimal

from rest_framework import serializers

from common.enums import BlueprintMode
from .models import (
    Attempt, AttemptItem, AttemptResponse, Blueprint, BlueprintQuestion, BlueprintSection,
    BlueprintVariant, Question, QuestionOption, SectionPoolEntry, SectionQuestion,
)


# ---------- Blueprint authoring (input) ----------
class QuestionRefIn(serializers.Serializer):
    question = serializers.PrimaryKeyRelatedField(queryset=Question.objects.all())
    marks = serializers.DecimalField(max_digits=6, decimal_places=2, min_value=Decimal("0.01"),
                                     required=False, default=Decimal("1.00"))


class PoolEntryIn(serializers.Serializer):
    question = serializers.PrimaryKeyRelatedField(queryset=Question.objects.all())
    # falls back to the section's pool_marks
    marks = serializers.DecimalField(max_digits=6, decimal_places=2, min_value=Decimal("0.01"),
                                     required=False, allow_null=True, default=None)


class SectionIn(serializers.Serializer):
    title = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")
    order = serializers.IntegerField(required=False, min_value=1)
    questions = QuestionRefIn(many=True, required=False, default=list)
    question_pool = PoolEntryIn(many=True, required=False, default=list)
    questions_to_select_from_pool = serializers.IntegerField(required=False, min_value=0, default=0)
    pool_marks = serializers.DecimalField(max_digits=6, decimal_places=2, min_value=Decimal("0.01"),
                                          required=False, default=Decimal("1.00"))
    randomize_question_order_in_section = serializers.BooleanField(required=False, default=False)


class VariantIn(serializers.Serializer):
    code = serializers.CharField(max_length=16)
    sections = SectionIn(many=True, allow_empty=False)
    negative_mark_value = serializers.DecimalField(max_digits=5, decimal_places=3, min_value=Decimal("0"),
                                                   max_value=Decimal("1"), required=False, allow_null=True)

    def validate_code(self, v):
        v = (v or "").strip()
        if not v:
            raise serializers.ValidationError("Variant code cannot be empty.")
        return v


class BlueprintWriteSerializer(serializers.Serializer):
    """
    Authoring payload. Content is one of ``questions`` / ``sections`` / ``variants``;
    the shape and minimum-count rules are enforced by the authoring service.
    """
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True)
    duration_minutes = serializers.IntegerField(required=False, min_value=1, max_value=24 * 60)
    mode = serializers.ChoiceField(choices=BlueprintMode.choices, required=False)
    test_type = serializers.CharField(max_length=64, required=False, allow_blank=True)
    year = serializers.IntegerField(required=False, allow_null=True, min_value=1900)
    max_attempts = serializers.IntegerField(required=False, min_value=1)
    start_at = serializers.DateTimeField(required=False, allow_null=True)
    end_at = serializers.DateTimeField(required=False, allow_null=True)

    randomize_section_order = serializers.BooleanField(required=False)
    negative_marking_enabled = serializers.BooleanField(required=False)
    negative_mark_value = serializers.DecimalField(max_digits=5, decimal_places=3, min_value=Decimal("0"),
                                                   max_value=Decimal("1"), required=False)

    questions = QuestionRefIn(many=True, required=False)
    sections = SectionIn(many=True, required=False)
    variants = VariantIn(many=True, required=False)

    def validate(self, attrs):
        start_at, end_at = attrs.get("start_at"), attrs.get("end_at")
        if start_at and end_at and start_at >= end_at:
            raise serializers.ValidationError("start_at must be earlier than end_at.")
        return attrs


class RandomBlueprintIn(serializers.Serializer):
    title = serializers.CharField(max_length=200, required=False, default="Practice Paper")
    count = serializers.IntegerField(min_value=1, max_value=500, required=False, default=50)
    duration_minutes = serializers.IntegerField(min_value=1, max_value=24 * 60, required=False, default=90)
    marks_per_question = serializers.DecimalField(max_digits=6, decimal_places=2, min_value=Decimal("0.01"),
                                                  required=False, default=Decimal("1.00"))


# ---------- Blueprint (output) ----------
class BlueprintQuestionSerializer(serializers.ModelSerializer):
    class Meta:
        model = BlueprintQuestion
        fields = ["question", "order", "marks"]


class SectionQuestionSerializer(serializers.ModelSerializer):
    class Meta:
        model = SectionQuestion
        fields = ["question", "order", "marks"]


class SectionPoolEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = SectionPoolEntry
        fields = ["question", "order", "marks"]


class BlueprintSectionSerializer(serializers.ModelSerializer):
    questions = SectionQuestionSerializer(many=True, read_only=True)
    question_pool = SectionPoolEntrySerializer(source="pool_entries", many=True, read_only=True)

    class Meta:
        model = BlueprintSection
        fields = [
            "id", "title", "order", "questions", "question_pool",
            "questions_to_select_from_pool", "pool_marks", "randomize_question_order_in_section",
        ]


class BlueprintVariantSerializer(serializers.ModelSerializer):
    sections = BlueprintSectionSerializer(many=True, read_only=True)

    class Meta:
        model = BlueprintVariant
        fields = ["id", "code", "order", "negative_mark_value", "sections"]


class BlueprintSerializer(serializers.ModelSerializer):
    questions = BlueprintQuestionSerializer(source="flat_questions", many=True, read_only=True)
    sections = serializers.SerializerMethodField()
    variants = BlueprintVariantSerializer(many=True, read_only=True)

    class Meta:
        model = Blueprint
        fields = [
            "id", "title", "description", "duration_minutes", "mode", "test_type", "year",
            "max_attempts", "start_at", "end_at",
            "randomize_section_order", "negative_marking_enabled", "negative_mark_value",
            "questions", "sections", "variants",
            "created_by", "updated_by", "created_at", "updated_at",
        ]
        read_only_fields = fields

    def get_sections(self, obj):
        top = [s for s in obj.sections.all() if s.variant_id is None]
        return BlueprintSectionSerializer(top, many=True).data


# ---------- Attempts ----------
class StartAttemptIn(serializers.Serializer):
    blueprint_id = serializers.UUIDField()
    variant_code = serializers.CharField(max_length=16, required=False, allow_blank=True)


class PublicOptionSerializer(serializers.ModelSerializer):
    """Option as shown to a candidate: never exposes correctness."""
    class Meta:
        model = QuestionOption
        fields = ["id", "text", "order"]


class AttemptItemPaperSerializer(serializers.ModelSerializer):
    question_id = serializers.UUIDField(source="question.id", read_only=True)
    text = serializers.CharField(source="question.text", read_only=True)
    question_type = serializers.CharField(source="question.question_type", read_only=True)
    options = serializers.SerializerMethodField()

    class Meta:
        model = AttemptItem
        fields = ["order", "section_title", "marks", "question_id", "text", "question_type", "options"]

    def get_options(self, obj):
        opts = obj.question.options.all()
        data = PublicOptionSerializer(opts, many=True).data
        for index, row in enumerate(data):
            row["index"] = index
        return data


class AttemptSerializer(serializers.ModelSerializer):
    blueprint_title = serializers.CharField(source="blueprint.title", read_only=True)

    class Meta:
        model = Attempt
        fields = [
            "id", "blueprint", "blueprint_title", "variant_code", "attempt_no", "status",
            "started_at", "submitted_at", "score", "max_score", "percentage", "time_taken_seconds",
        ]
        read_only_fields = fields


class AttemptResponseSerializer(serializers.ModelSerializer):
    question_text = serializers.CharField(source="question.text", read_only=True)
    explanation = serializers.CharField(source="question.explanation", read_only=True)

    class Meta:
        model = AttemptResponse
        fields = [
            "question", "question_text", "explanation",
            "selected_option_indices", "correct_option_indices", "is_correct", "earned_marks",
        ]
