# exams/exceptions.py
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound
from rest_framework.views import exception_handler


class BlueprintInvalid(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Blueprint is invalid."
    default_code = "blueprint_invalid"


class NotYetOpen(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "This test has not started yet."
    default_code = "not_yet_open"


class Closed(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "This test has ended."
    default_code = "closed"


class BlueprintNotFound(NotFound):
    default_detail = "Test not found."


class AttemptNotFound(NotFound):
    default_detail = "Attempt not found."


class InvalidInput(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "invalid_input"


class AlreadySubmitted(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This attempt has already been submitted."
    default_code = "already_submitted"


class AttemptLimitReached(APIException):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_detail = "You have reached the maximum number of attempts for this test."
    default_code = "attempt_limit_reached"


def coded_exception_handler(exc, context):
    """DRF handler that also exposes the machine-readable error code."""
    response = exception_handler(exc, context)
    if response is not None and isinstance(exc, APIException) and isinstance(response.data, dict):
        codes = exc.get_codes()
        if isinstance(codes, str):
            response.data["code"] = codes
    return response
