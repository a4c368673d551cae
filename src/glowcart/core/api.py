"""JSON view helpers shared by the storefront API.

Views built on ``ApiView`` never let a ``StoreError`` or ``PermissionDenied``
escape: both become typed JSON error payloads.
"""

import json

from django.core.exceptions import PermissionDenied, ValidationError
from django.http import JsonResponse
from django.views import View

from glowcart.exceptions import StoreError


class BadRequest(StoreError):
    """Request body could not be parsed."""

    code = "bad_request"


def json_body(request) -> dict:
    """Parse the request body as a JSON object."""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except json.JSONDecodeError:
        raise BadRequest("Invalid JSON")
    if not isinstance(data, dict):
        raise BadRequest("Expected a JSON object")
    return data


def error_response(error: StoreError) -> JsonResponse:
    return JsonResponse(error.as_dict(), status=error.status)


class ApiView(View):
    """Base class for JSON endpoints.

    Set ``login_required = True`` to answer anonymous requests with 401 and
    ``admin_required = True`` to answer non-administrators with 403.
    """

    login_required = False
    admin_required = False

    def dispatch(self, request, *args, **kwargs):
        user = request.user
        if (self.login_required or self.admin_required) and not user.is_authenticated:
            return JsonResponse({"error": "authentication_required", "message": "Authentication required"}, status=401)
        if self.admin_required and not getattr(user, "is_admin", False):
            return JsonResponse({"error": "forbidden", "message": "Administrator access required"}, status=403)

        try:
            return super().dispatch(request, *args, **kwargs)
        except StoreError as e:
            return error_response(e)
        except PermissionDenied as e:
            return JsonResponse({"error": "forbidden", "message": str(e) or "Forbidden"}, status=403)
        except ValidationError as e:
            details = e.message_dict if hasattr(e, "error_dict") else {"errors": e.messages}
            return JsonResponse(
                {"error": "validation_error", "message": "Invalid data", "details": details},
                status=400,
            )
