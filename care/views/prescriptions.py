"""
Prescription endpoints.

Doctors create prescriptions for their own appointments.  The reminders
endpoint is polled by an external scheduler (every 15 minutes, say) with
the current ``HH:mm``; it may be protected by a shared secret through
``REMINDER_WEBHOOK_SECRET``.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from care.permissions import HasReminderSecret, IsDoctorRole
from care.services.prescriptions import create_prescription, format_prescription, prescriptions_to_remind
from care.throttling import ReminderRateThrottle


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def create(request):
    prescription = create_prescription(request.user, request.data)
    return Response({
        'success': True,
        'message': 'Prescription added successfully!',
        'prescription': format_prescription(prescription),
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([HasReminderSecret])
@throttle_classes([ReminderRateThrottle])
def reminders(request):
    return Response(prescriptions_to_remind(request.query_params.get('time')))

