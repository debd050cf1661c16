"""
URL mappings for the care portal API.

Paths mirror those the front-end calls (``/api/v1/<area>/<action>``).
Trailing slashes are deliberately omitted.
"""
from django.urls import path, include

from .auth_views import login_view, jwt_refresh_view, jwt_logout_view
from .views import appointments, donations, health, prescriptions


urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),
    # Authentication
    path('api/v1/auth/login', login_view, name='login_view'),
    path('api/v1/auth/refresh', jwt_refresh_view, name='jwt_refresh_view'),
    path('api/v1/auth/logout', jwt_logout_view, name='jwt_logout_view'),
    # Blood donation
    path('api/v1/donation/donate', donations.donate, name='donation-donate'),
    path('api/v1/donation/history', donations.history, name='donation-history'),
    path('api/v1/donation/centers', donations.centers, name='donation-centers'),
    path('api/v1/donation/top-donors', donations.leaderboard, name='donation-top-donors'),
    path('api/v1/donation/newCentre', donations.new_centre, name='donation-new-centre'),
    # Prescriptions
    path('api/v1/prescription/create-Prescription', prescriptions.create, name='prescription-create'),
    path('api/v1/prescription/reminders', prescriptions.reminders, name='prescription-reminders'),
    # Appointments
    path('api/v1/appointment/post', appointments.post_appointment, name='appointment-post'),
    path('api/v1/appointment/getall', appointments.get_all_appointments, name='appointment-list'),
    path('api/v1/appointment/update/<int:pk>', appointments.update_status, name='appointment-update'),
    path('api/v1/appointment/delete/<int:pk>', appointments.remove, name='appointment-delete'),
    path('api/v1/appointment/getPatientAppointments', appointments.my_appointments, name='appointment-mine'),
]
