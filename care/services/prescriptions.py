"""
Prescription rules: creation checks and reminder matching.

A doctor writes a prescription against one of their own appointments.
An external scheduler polls :func:`prescriptions_to_remind` with the
current ``HH:mm`` and sends the returned reminders itself.
"""
import logging
import re
from typing import Optional

from django.contrib.auth import get_user_model
from django.utils import timezone

from care.exceptions import AuthorizationError, ValidationError
from care.models import Appointment, Prescription
from care.services.audit import log_action
from care.services.dates import parse_when
from care.services.sanitize import clean_text

User = get_user_model()

logger = logging.getLogger(__name__)

TIME_RE = re.compile(r'^([0-1]\d|2[0-3]):([0-5]\d)$')

REMINDER_MEDIUMS = ('sms', 'email', 'whatsapp')

REQUIRED_FIELDS = (
    'patientId', 'appointmentId', 'medicineName', 'dosage',
    'frequency', 'reminderTimes', 'startDate', 'endDate',
)


def is_valid_time(value) -> bool:
    return isinstance(value, str) and TIME_RE.match(value) is not None


def _missing(value) -> bool:
    if isinstance(value, (list, tuple)):
        return False
    return not value


def _get(model, pk):
    try:
        pk = int(pk)
    except (TypeError, ValueError):
        return None
    return model.objects.filter(pk=pk).first()


def create_prescription(doctor: User, data: dict) -> Prescription:
    """Validate ``data`` (camelCase request fields) and create the prescription.

    Checks run in a fixed order and the first failure wins.
    """
    if any(_missing(data.get(f)) for f in REQUIRED_FIELDS):
        raise ValidationError('Please fill all required fields!')

    patient_id = data['patientId']
    patient = _get(User, patient_id)
    if patient is None or patient.role != User.ROLE_PATIENT:
        raise ValidationError('Invalid patient ID')

    appointment = _get(Appointment, data['appointmentId'])
    if appointment is None:
        raise ValidationError('Invalid appointment ID')

    if appointment.doctor_id != doctor.id:
        raise AuthorizationError('Unauthorized to prescribe for this appointment')

    if appointment.patient_id != patient.id:
        raise ValidationError('Patient and appointment mismatch')

    reminder_times = data['reminderTimes']
    if not isinstance(reminder_times, (list, tuple)) or not all(is_valid_time(t) for t in reminder_times):
        raise ValidationError('Reminder times must be in HH:mm format.')

    start = parse_when(data['startDate'])
    end = parse_when(data['endDate'], end_of_day=True)
    if start is None or end is None:
        raise ValidationError('Start and end dates must be valid.')
    if end < start:
        raise ValidationError('End date must be after the start date.')

    medium = data.get('reminderMedium')
    if medium:
        medium = str(medium).lower()
        if medium not in REMINDER_MEDIUMS:
            raise ValidationError('Reminder medium must be one of: sms, email, or whatsapp.')

    fields = {}
    if medium:
        fields['reminder_medium'] = medium
    prescription = Prescription.objects.create(
        patient=patient,
        doctor=doctor,
        appointment=appointment,
        medicine_name=clean_text(data['medicineName']),
        dosage=clean_text(data['dosage']),
        frequency=clean_text(data['frequency']),
        reminder_times=list(reminder_times),
        start_date=start,
        end_date=end,
        **fields,
    )
    log_action(user=doctor, action='prescription_create', object_type='prescription', object_id=prescription.id,
               detail={'patientId': patient.id, 'appointmentId': appointment.id})
    logger.info('prescription %s created by doctor=%s for patient=%s', prescription.id, doctor.id, patient.id)
    return prescription


def format_prescription(p: Prescription) -> dict:
    return {
        'id': p.id,
        'patientId': p.patient_id,
        'doctorId': p.doctor_id,
        'appointmentId': p.appointment_id,
        'medicineName': p.medicine_name,
        'dosage': p.dosage,
        'frequency': p.frequency,
        'reminderTimes': list(p.reminder_times or []),
        'startDate': p.start_date.isoformat(),
        'endDate': p.end_date.isoformat(),
        'reminderMedium': p.reminder_medium,
        'isActive': p.is_active,
        'createdAt': p.created_at.isoformat() if p.created_at else None,
    }


def matches_time(reminder_times, query: str) -> bool:
    """Case-insensitive prefix match: ``"09:0"`` matches ``"09:00"``."""
    q = query.lower()
    return any(isinstance(t, str) and t.lower().startswith(q) for t in (reminder_times or []))


def prescriptions_to_remind(time: Optional[str], now=None) -> list:
    """Return one reminder record per active prescription due at ``time``."""
    query = (time or '').strip()
    if not query:
        raise ValidationError('Missing time parameter in query.')
    now = now or timezone.now()
    logger.info('checking reminders for time=%s at server time %s', query, now.isoformat())

    # icontains over the stored JSON text narrows the set; the prefix test below decides
    candidates = (Prescription.objects
                  .filter(is_active=True, start_date__lte=now, end_date__gte=now, reminder_times__icontains=query)
                  .order_by('id'))
    due = [p for p in candidates if matches_time(p.reminder_times, query)]
    logger.info('found %d prescriptions due at %s', len(due), query)

    patients = {
        u.id: u for u in User.objects.filter(id__in={p.patient_id for p in due})
        .only('id', 'first_name', 'last_name', 'email', 'phone')
    }
    result = []
    for p in due:
        patient = patients.get(p.patient_id)
        first = getattr(patient, 'first_name', '') or ''
        last = getattr(patient, 'last_name', '') or ''
        result.append({
            'patientName': f"{first} {last}".strip() or 'Unknown',
            'patientEmail': getattr(patient, 'email', '') or '',
            'patientPhone': getattr(patient, 'phone', '') or '',
            'medicineName': p.medicine_name,
            'dosage': p.dosage,
            'reminderTimes': list(p.reminder_times or []),
            'reminderMedium': p.reminder_medium,
        })
    return result
