from django.contrib import admin
from .models import (
    Question, QuestionOption, Blueprint, BlueprintQuestion, BlueprintVariant, BlueprintSection,
    SectionQuestion, SectionPoolEntry, Attempt, AttemptItem, AttemptResponse,
)


# ----- Inlines -----
class QuestionOptionInline(admin.TabularInline):
    model = QuestionOption
    extra = 1
    fields = ("text", "is_correct", "order")
    ordering = ("order",)


class BlueprintQuestionInline(admin.TabularInline):
    model = BlueprintQuestion
    extra = 0
    raw_id_fields = ("question",)
    fields = ("question", "order", "marks")
    ordering = ("order",)


class BlueprintVariantInline(admin.TabularInline):
    model = BlueprintVariant
    extra = 0
    fields = ("code", "order", "negative_mark_value")


class BlueprintSectionInline(admin.TabularInline):
    model = BlueprintSection
    extra = 0
    show_change_link = True
    fields = ("title", "variant", "order", "questions_to_select_from_pool", "pool_marks",
              "randomize_question_order_in_section")
    ordering = ("order",)


class SectionQuestionInline(admin.TabularInline):
    model = SectionQuestion
    extra = 0
    raw_id_fields = ("question",)
    fields = ("question", "order", "marks")
    ordering = ("order",)


class SectionPoolEntryInline(admin.TabularInline):
    model = SectionPoolEntry
    extra = 0
    raw_id_fields = ("question",)
    fields = ("question", "order", "marks")


class AttemptItemInline(admin.TabularInline):
    model = AttemptItem
    extra = 0
    raw_id_fields = ("question",)
    fields = ("order", "question", "marks", "section_title")
    readonly_fields = fields
    can_delete = False


class AttemptResponseInline(admin.TabularInline):
    model = AttemptResponse
    extra = 0
    raw_id_fields = ("question",)
    fields = ("question", "selected_option_indices", "correct_option_indices", "is_correct", "earned_marks")
    readonly_fields = fields
    can_delete = False


# ----- ModelAdmins -----
@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ("id", "short_text", "question_type", "difficulty",
                    "is_active", "created_at")
    list_filter = ("is_active", "difficulty", "question_type")
    search_fields = ("text",)
    inlines = [QuestionOptionInline]
    readonly_fields = ("created_at", "updated_at")
    ordering = ("-created_at",)

    def short_text(self, obj):
        return (obj.text or "")[:80]


@admin.register(Blueprint)
class BlueprintAdmin(admin.ModelAdmin):
    list_display = (
        "title", "mode", "test_type", "year", "duration_minutes", "max_attempts",
        "start_at", "end_at", "negative_marking_enabled", "negative_mark_value", "created_at",
    )
    list_filter = ("mode", "test_type", "year", "negative_marking_enabled", "randomize_section_order")
    search_fields = ("title", "description")
    date_hierarchy = "start_at"
    raw_id_fields = ("created_by", "updated_by")
    inlines = [BlueprintVariantInline, BlueprintSectionInline, BlueprintQuestionInline]
    readonly_fields = ("created_at", "updated_at")


@admin.register(BlueprintSection)
class BlueprintSectionAdmin(admin.ModelAdmin):
    list_display = ("title", "blueprint", "variant", "order", "questions_to_select_from_pool", "pool_marks")
    list_filter = ("blueprint",)
    search_fields = ("title", "blueprint__title")
    raw_id_fields = ("blueprint", "variant")
    ordering = ("blueprint", "order")
    inlines = [SectionQuestionInline, SectionPoolEntryInline]


@admin.register(Attempt)
class AttemptAdmin(admin.ModelAdmin):
    list_display = ("id", "blueprint", "student", "variant_code", "attempt_no", "status",
                    "score", "max_score", "percentage", "time_taken_seconds",
                    "started_at", "submitted_at")
    list_filter = ("status", "blueprint")
    search_fields = ("student__username", "student__email", "blueprint__title")
    raw_id_fields = ("blueprint", "student")
    readonly_fields = ("started_at", "submitted_at", "score", "max_score", "percentage",
                       "created_at", "updated_at")
    inlines = [AttemptItemInline, AttemptResponseInline]
