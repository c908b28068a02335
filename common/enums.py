from django.db import models


class Difficulty(models.TextChoices):
    EASY = "easy", "Easy"
    MEDIUM = "medium", "Medium"
    HARD = "hard", "Hard"


class QuestionType(models.TextChoices):
    SINGLE_CHOICE = "single", "Single choice"
    MULTI_CHOICE  = "multi", "Multi choice"
    TRUE_FALSE    = "bool",  "True/False"


class BlueprintMode(models.TextChoices):
    PRACTICE = "practice", "Practice"
    LIVE     = "live",     "Live"


class AttemptStatus(models.TextChoices):
    STARTED   = "started",   "Started"
    SUBMITTED = "submitted", "Submitted"
