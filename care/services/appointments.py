import logging
from typing import Optional

from django.contrib.auth import get_user_model

from care.exceptions import NotFoundError, ValidationError
from care.models import Appointment
from care.services.audit import log_action
from care.services.dates import parse_when
from care.services.sanitize import clean_text

User = get_user_model()

logger = logging.getLogger(__name__)


def _get_appointment(appointment_id) -> Appointment:
    try:
        pk = int(appointment_id)
    except (TypeError, ValueError):
        raise NotFoundError('Appointment not found!')
    appt = Appointment.objects.select_related('patient', 'doctor').filter(pk=pk).first()
    if appt is None:
        raise NotFoundError('Appointment not found!')
    return appt


def book_appointment(patient: User, *, doctor_id, appointment_date, department: Optional[str]=None,
                     reason: Optional[str]=None) -> Appointment:
    if not doctor_id or not appointment_date:
        raise ValidationError('Please fill all required fields!')
    try:
        doctor = User.objects.filter(pk=int(doctor_id), role=User.ROLE_DOCTOR).first()
    except (TypeError, ValueError):
        doctor = None
    if doctor is None:
        raise ValidationError('Doctor not found!')
    when = parse_when(appointment_date)
    if when is None:
        raise ValidationError('Appointment date must be a valid date.')
    appt = Appointment.objects.create(
        patient=patient,
        doctor=doctor,
        appointment_date=when,
        department=clean_text(department),
        reason=clean_text(reason),
    )
    log_action(user=patient, action='appointment_book', object_type='appointment', object_id=appt.id,
               detail={'doctorId': doctor.id})
    logger.info('appointment %s booked by patient=%s with doctor=%s', appt.id, patient.id, doctor.id)
    return appt


def list_appointments():
    return Appointment.objects.select_related('patient', 'doctor').order_by('-created_at', '-id')


def doctor_appointments(doctor: User):
    return (Appointment.objects.select_related('patient', 'doctor')
            .filter(doctor=doctor).order_by('appointment_date', 'id'))


def update_appointment_status(appointment_id, new_status, *, by: Optional[User]=None) -> Appointment:
    appt = _get_appointment(appointment_id)
    if new_status not in dict(Appointment.STATUS_CHOICES):
        raise ValidationError('Status must be one of: Pending, Accepted, Rejected.')
    old = appt.status
    appt.status = new_status
    appt.save(update_fields=['status'])
    log_action(user=by, action='appointment_status', object_type='appointment', object_id=appt.id,
               detail={'from': old, 'to': new_status})
    return appt


def delete_appointment(appointment_id, *, by: Optional[User]=None) -> None:
    appt = _get_appointment(appointment_id)
    pk = appt.pk
    appt.delete()
    log_action(user=by, action='appointment_delete', object_type='appointment', object_id=pk)


def _person(u: User) -> dict:
    return {
        'id': u.id,
        'firstName': u.first_name,
        'lastName': u.last_name,
        'email': u.email,
        'phone': u.phone,
    }


def format_appointment(a: Appointment) -> dict:
    return {
        'id': a.id,
        'patientId': a.patient_id,
        'doctorId': a.doctor_id,
        'patient': _person(a.patient),
        'doctor': _person(a.doctor),
        'department': a.department,
        'appointmentDate': a.appointment_date.isoformat(),
        'reason': a.reason,
        'status': a.status,
        'createdAt': a.created_at.isoformat() if a.created_at else None,
    }
