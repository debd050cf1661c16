from rest_framework import serializers

from care.models import Appointment

class AppointmentCreateSerializer(serializers.Serializer):
    doctorId = serializers.CharField(required=False, allow_blank=True, max_length=32)
    appointmentDate = serializers.CharField(required=False, allow_blank=True, max_length=64)
    department = serializers.CharField(required=False, allow_blank=True, max_length=100)
    reason = serializers.CharField(required=False, allow_blank=True, max_length=2000)

class AppointmentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c for c, _ in Appointment.STATUS_CHOICES])
