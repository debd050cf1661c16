"""
Appointment endpoints.

Patients book appointments with a doctor; administrators list, update
and delete them; doctors list the appointments assigned to them.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from care.permissions import IsAdminRole, IsDoctorRole, IsPatientRole
from care.serializers.appointment import AppointmentCreateSerializer, AppointmentStatusSerializer
from care.services.appointments import (
    book_appointment,
    delete_appointment,
    doctor_appointments,
    format_appointment,
    list_appointments,
    update_appointment_status,
)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPatientRole])
def post_appointment(request):
    s = AppointmentCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    appt = book_appointment(
        request.user,
        doctor_id=vd.get('doctorId'),
        appointment_date=vd.get('appointmentDate'),
        department=vd.get('department'),
        reason=vd.get('reason'),
    )
    return Response({'success': True, 'message': 'Appointment booked!', 'appointment': format_appointment(appt)},
                    status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def get_all_appointments(request):
    return Response({'success': True, 'appointments': [format_appointment(a) for a in list_appointments()]})


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsAdminRole])
def update_status(request, pk: int):
    s = AppointmentStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appt = update_appointment_status(pk, s.validated_data['status'], by=request.user)
    return Response({'success': True, 'message': 'Appointment status updated!', 'appointment': format_appointment(appt)})


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def remove(request, pk: int):
    delete_appointment(pk, by=request.user)
    return Response({'success': True, 'message': 'Appointment deleted!'})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def my_appointments(request):
    """Appointments assigned to the calling doctor."""
    return Response({'success': True, 'appointments': [format_appointment(a) for a in doctor_appointments(request.user)]})
