"""
Role based permission classes.

Each route is guarded by the role that may call it: patients book
appointments and register donations, doctors write prescriptions and
administrators manage centers and appointments.
"""
import hmac

from django.conf import settings
from rest_framework.permissions import BasePermission

from care.exceptions import AuthorizationError


def _has_role(request, *roles: str) -> bool:
    user = getattr(request, "user", None)
    return bool(user and user.is_authenticated and getattr(user, "role", None) in roles)


class IsAdminRole(BasePermission):
    """Allow access only to users with the administrator role."""
    message = "Admin access required."

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _has_role(request, "admin")


class IsPatientRole(BasePermission):
    """Allow access only to users with the patient role."""
    message = "Patient access required."

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _has_role(request, "patient")


class IsDoctorRole(BasePermission):
    """Allow access only to users with the doctor role."""
    message = "Doctor access required."

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _has_role(request, "doctor")


class HasReminderSecret(BasePermission):
    """Check the shared secret of the reminder webhook, when one is configured.

    Callers of the webhook are never authenticated users, so a bad secret
    is reported as 403 directly instead of DRF's 401 for anonymous callers.
    """

    def has_permission(self, request, view) -> bool:
        expected = getattr(settings, "REMINDER_WEBHOOK_SECRET", "")
        if not expected:
            return True
        supplied = request.headers.get("X-Reminder-Secret", "")
        if not hmac.compare_digest(supplied.encode(), expected.encode()):
            raise AuthorizationError("Invalid reminder secret.")
        return True
