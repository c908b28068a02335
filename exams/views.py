# exams/views.py
from django.db.models import Prefetch
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import AuthorCanWriteOthersRead, IsAdminOrTeacher, IsStudent
from .exceptions import AttemptNotFound, InvalidInput
from .models import (
    Attempt, Blueprint, BlueprintSection, BlueprintVariant, Question, QuestionOption,
)
from .serializers import (
    AttemptItemPaperSerializer, AttemptResponseSerializer, AttemptSerializer,
    BlueprintSerializer, BlueprintWriteSerializer, RandomBlueprintIn, StartAttemptIn,
)
from .services import attempts as attempt_service
from .services import authoring


class SmallPage(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 200


def _sections_qs():
    return BlueprintSection.objects.prefetch_related("questions", "pool_entries").order_by("order", "created_at")


class BlueprintViewSet(viewsets.ModelViewSet):
    """
    Authoring surface for blueprints. Blueprints are never deleted here;
    attempts keep a protected reference to them.
    """
    permission_classes = [AuthorCanWriteOthersRead]
    pagination_class = SmallPage
    filterset_fields = ["mode", "test_type", "year"]
    http_method_names = ["get", "post", "put", "patch", "head", "options"]

    def get_queryset(self):
        return (Blueprint.objects
                .prefetch_related(
                    "flat_questions",
                    Prefetch("sections", queryset=_sections_qs()),
                    Prefetch("variants", queryset=BlueprintVariant.objects.prefetch_related(
                        Prefetch("sections", queryset=_sections_qs()))),
                ))

    def get_serializer_class(self):
        if self.action in ("create", "update", "partial_update"):
            return BlueprintWriteSerializer
        return BlueprintSerializer

    def create(self, request, *args, **kwargs):
        ser = BlueprintWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        bp = authoring.create_blueprint(ser.validated_data, created_by=request.user)
        return Response(BlueprintSerializer(self.get_queryset().get(pk=bp.pk)).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        bp = self.get_object()
        ser = BlueprintWriteSerializer(data=request.data, partial=partial)
        ser.is_valid(raise_exception=True)
        authoring.update_blueprint(bp, ser.validated_data, updated_by=request.user)
        return Response(BlueprintSerializer(self.get_queryset().get(pk=bp.pk)).data)

    @action(detail=True, methods=["post"], url_path="clone", permission_classes=[IsAdminOrTeacher])
    def clone(self, request, pk=None):
        copy = authoring.clone_blueprint(self.get_object(), by_user=request.user)
        return Response(BlueprintSerializer(self.get_queryset().get(pk=copy.pk)).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], url_path="random", permission_classes=[IsAdminOrTeacher])
    def random(self, request):
        ser = RandomBlueprintIn(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data
        bp = authoring.create_random_blueprint(
            count=d["count"],
            title=d["title"],
            duration=d["duration_minutes"],
            marks_per_question=d["marks_per_question"],
            created_by=request.user,
        )
        return Response(BlueprintSerializer(self.get_queryset().get(pk=bp.pk)).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"], url_path="preview", permission_classes=[IsAdminOrTeacher])
    def preview(self, request, pk=None):
        bp = self.get_object()
        seed = request.query_params.get("seed") or None
        code, items, negative_value = authoring.preview_assembly(
            bp, variant_code=request.query_params.get("variant") or None, seed=seed,
        )
        texts = dict(Question.objects.filter(id__in=[it.question_id for it in items]).values_list("id", "text"))
        return Response({
            "blueprint_id": str(bp.id),
            "variant_code": code,
            "seed": seed,
            "negative_marking_enabled": bp.negative_marking_enabled,
            "negative_mark_value": float(negative_value),
            "max_score": float(sum(it.marks for it in items)),
            "items": [
                {
                    "order": n,
                    "section_title": it.section_title,
                    "question_id": str(it.question_id),
                    "text": texts.get(it.question_id, ""),
                    "marks": float(it.marks),
                }
                for n, it in enumerate(items, start=1)
            ],
        })


def _paper_items(attempt):
    items = (attempt.items
             .select_related("question")
             .prefetch_related(Prefetch("question__options",
                                        queryset=QuestionOption.objects.order_by("order", "created_at")))
             .order_by("order"))
    return AttemptItemPaperSerializer(items, many=True).data


def _own_attempt(request, attempt_id):
    attempt = Attempt.objects.select_related("blueprint").filter(pk=attempt_id, student=request.user).first()
    if attempt is None:
        raise AttemptNotFound()
    return attempt


class AttemptStartView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsStudent]

    def post(self, request):
        ser = StartAttemptIn(data=request.data)
        if not ser.is_valid():
            raise InvalidInput(ser.errors)
        d = ser.validated_data

        blueprint = attempt_service.load_blueprint(d["blueprint_id"])
        attempt_service.ensure_attempts_remaining(blueprint, request.user)

        attempt = attempt_service.start_attempt(
            blueprint.pk, request.user, variant_code=d.get("variant_code") or None,
        )
        return Response({
            "attempt_id": str(attempt.id),
            "attempt_no": attempt.attempt_no,
            "status": attempt.status,
            "variant_code": attempt.variant_code or None,
            "duration_minutes": blueprint.duration_minutes,
            "started_at": attempt.started_at,
            "max_score": float(attempt.max_score),
            "items": _paper_items(attempt),
        }, status=status.HTTP_201_CREATED)


class AttemptSubmitView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsStudent]

    def post(self, request, attempt_id):
        payload = request.data.get("responses") if isinstance(request.data, dict) else request.data
        result = attempt_service.submit_attempt(attempt_id, payload, student=request.user)
        return Response({"attempt_id": str(attempt_id), "submitted": True, **result.as_dict()})


class MyAttemptsView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsStudent]

    def get(self, request):
        qs = Attempt.objects.filter(student=request.user).select_related("blueprint")
        return Response(AttemptSerializer(qs, many=True).data)


class AttemptPaperView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsStudent]

    def get(self, request, attempt_id):
        attempt = _own_attempt(request, attempt_id)
        return Response({
            "attempt": AttemptSerializer(attempt).data,
            "duration_minutes": attempt.blueprint.duration_minutes,
            "items": _paper_items(attempt),
        })


class AttemptReviewView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsStudent]

    def get(self, request, attempt_id):
        attempt = _own_attempt(request, attempt_id)
        if not attempt.is_submitted:
            raise InvalidInput("Review is available after the attempt is submitted.")
        rows = attempt.responses.select_related("question").order_by("order")
        return Response({
            "attempt": AttemptSerializer(attempt).data,
            "responses": AttemptResponseSerializer(rows, many=True).data,
        })
