"""
Database models for the care portal.

These models capture the concepts shared by the appointment,
prescription and blood-donation features: users with a role, donation
centers and the donations registered at them, appointments between a
patient and a doctor, and the prescriptions written against those
appointments.  Field names follow Django conventions; the camelCase
names the front-end expects are produced by the service layer.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Custom user model with a role and donation aggregates.

    ``total_donations``, ``streak_count`` and ``badges`` are maintained by
    :func:`care.services.donations.register_donation`; ``badges`` is a
    JSON list used with set semantics (each label appears at most once
    and is never removed).
    """
    ROLE_PATIENT = 'patient'
    ROLE_DOCTOR = 'doctor'
    ROLE_ADMIN = 'admin'
    ROLE_CHOICES = [
        (ROLE_PATIENT, 'Patient'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_ADMIN, 'Administrator'),
    ]
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)
    phone = models.CharField(max_length=20, blank=True)
    total_donations = models.PositiveIntegerField(default=0, db_index=True)
    streak_count = models.PositiveIntegerField(default=0)
    badges = models.JSONField(default=list, blank=True)

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class DonationCenter(models.Model):
    """A physical blood collection site with aggregate donor stats."""
    name = models.CharField(max_length=255)
    city = models.CharField(max_length=100, blank=True)
    address = models.CharField(max_length=255, blank=True)
    contact_number = models.CharField(max_length=32, blank=True)
    total_donations = models.PositiveIntegerField(default=0, db_index=True)
    donors = models.ManyToManyField(User, blank=True, related_name='donation_centers')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.city})" if self.city else self.name


class Donation(models.Model):
    """One entry of a user's donation list, kept in registration order."""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='donations')
    center = models.ForeignKey(
        DonationCenter, null=True, on_delete=models.SET_NULL, related_name='donations'
    )
    date = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['id']
        indexes = [models.Index(fields=['user', 'date'], name='care_donation_user_date_idx')]

    def __str__(self) -> str:
        return f"donation u={self.user_id} c={self.center_id} @ {self.date:%F}"


class Appointment(models.Model):
    STATUS_PENDING = 'Pending'
    STATUS_ACCEPTED = 'Accepted'
    STATUS_REJECTED = 'Rejected'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_ACCEPTED, 'Accepted'),
        (STATUS_REJECTED, 'Rejected'),
    ]
    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='patient_appointments')
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='doctor_appointments')
    department = models.CharField(max_length=100, blank=True)
    appointment_date = models.DateTimeField()
    reason = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['doctor', 'appointment_date'], name='care_appt_doctor_date_idx'),
            models.Index(fields=['patient', 'appointment_date'], name='care_appt_patient_date_idx'),
        ]

    def __str__(self) -> str:
        return f"appt p={self.patient_id} d={self.doctor_id} @ {self.appointment_date:%F %R}"


class Prescription(models.Model):
    """A medicine course written by a doctor against one appointment.

    ``reminder_times`` holds ``HH:mm`` strings; reminders are due while
    ``start_date <= now <= end_date`` and ``is_active`` is set.
    """
    MEDIUM_SMS = 'sms'
    MEDIUM_EMAIL = 'email'
    MEDIUM_WHATSAPP = 'whatsapp'
    MEDIUM_CHOICES = [
        (MEDIUM_SMS, 'SMS'),
        (MEDIUM_EMAIL, 'Email'),
        (MEDIUM_WHATSAPP, 'WhatsApp'),
    ]
    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='prescriptions')
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='prescriptions_written')
    appointment = models.ForeignKey(Appointment, on_delete=models.CASCADE, related_name='prescriptions')
    medicine_name = models.CharField(max_length=255)
    dosage = models.CharField(max_length=100)
    frequency = models.CharField(max_length=100)
    reminder_times = models.JSONField(default=list)
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    reminder_medium = models.CharField(max_length=16, choices=MEDIUM_CHOICES, default=MEDIUM_SMS)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['is_active', 'start_date', 'end_date'], name='care_rx_active_window_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.medicine_name} for p={self.patient_id}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='care_audit_action_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='care_audit_object_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
