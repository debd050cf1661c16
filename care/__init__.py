"""Care application for the hospital / blood-donation portal.

This package contains models, services, serializers, views and route
registrations for appointments, prescriptions with reminders and
blood-donation tracking.
"""
