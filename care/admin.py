"""
Django admin registrations for the care models.

Registering the models here lets administrators inspect donations,
centers, appointments and prescriptions via the ``/admin/`` URL and
perform manual corrections during development.
"""

from django.contrib import admin

from .models import (
    Appointment,
    AuditEvent,
    Donation,
    DonationCenter,
    Prescription,
    User,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'role', 'total_donations', 'streak_count', 'is_staff')
    list_filter = ('role',)
    search_fields = ('username', 'first_name', 'last_name', 'email', 'phone')


class DonationInline(admin.TabularInline):
    model = Donation
    extra = 0
    fields = ('user', 'date')
    raw_id_fields = ('user',)


@admin.register(DonationCenter)
class DonationCenterAdmin(admin.ModelAdmin):
    list_display = ('name', 'city', 'contact_number', 'total_donations', 'created_at')
    search_fields = ('name', 'city', 'address')
    filter_horizontal = ('donors',)
    inlines = [DonationInline]


@admin.register(Donation)
class DonationAdmin(admin.ModelAdmin):
    list_display = ('user', 'center', 'date')
    list_filter = ('center',)
    date_hierarchy = 'date'


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'department', 'appointment_date', 'status')
    list_filter = ('status', 'department')
    search_fields = ('patient__username', 'doctor__username')


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ('medicine_name', 'patient', 'doctor', 'start_date', 'end_date', 'reminder_medium', 'is_active')
    list_filter = ('is_active', 'reminder_medium')
    search_fields = ('medicine_name', 'patient__username')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action',)
