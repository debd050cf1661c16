"""
Management command to populate the database with demo data.

Donations are registered through the donation service so that totals,
streaks, badges and center donors come out consistent.
"""
from datetime import timedelta
import random

from django.core.management.base import BaseCommand
from django.contrib.auth.hashers import make_password
from django.utils import timezone

from care.models import Appointment, DonationCenter, Prescription, User
from care.services.donations import create_center, register_donation


class Command(BaseCommand):
    help = 'Populate database with demo centers, users, appointments, prescriptions and donations'

    def add_arguments(self, parser):
        parser.add_argument('--seed', type=int, default=7)

    def handle(self, *args, **options):
        random.seed(options['seed'])
        self.stdout.write('Creating demo data...')
        centers = self.create_centers()
        doctors = self.create_users('doctor', 3)
        patients = self.create_users('patient', 8)
        appointments = self.create_appointments(patients, doctors)
        self.create_prescriptions(appointments)
        self.create_donations(patients, centers)
        self.stdout.write(self.style.SUCCESS('Demo data created.'))

    def create_centers(self):
        centers_data = [
            {'name': 'City Hospital', 'city': 'Pune', 'address': '12 MG Road', 'contact_number': '020-5550101'},
            {'name': 'Red Cross Blood Bank', 'city': 'Mumbai', 'address': '4 Marine Drive', 'contact_number': '022-5550188'},
            {'name': 'Lifeline Donor Centre', 'city': 'Bengaluru', 'address': '77 Residency Road', 'contact_number': '080-5550142'},
        ]
        centers = []
        for data in centers_data:
            center = DonationCenter.objects.filter(name=data['name']).first() or create_center(**data)
            centers.append(center)
            self.stdout.write(f'Center: {center.name}')
        return centers

    def create_users(self, role, count):
        users = []
        for i in range(1, count + 1):
            username = f'{role}{i}'
            user, created = User.objects.get_or_create(
                username=username,
                defaults={
                    'email': f'{username}@portal.test',
                    'password': make_password('P@ssw0rd1'),
                    'role': role,
                    'first_name': role.capitalize(),
                    'last_name': str(i),
                    'phone': f'+91-90000{i:05d}',
                },
            )
            users.append(user)
            self.stdout.write(f'{role}: {user.username}')
        return users

    def create_appointments(self, patients, doctors):
        now = timezone.now()
        appointments = []
        for patient in patients:
            appt = Appointment.objects.create(
                patient=patient,
                doctor=random.choice(doctors),
                department=random.choice(['Cardiology', 'Neurology', 'Orthopedics', 'General']),
                appointment_date=now + timedelta(days=random.randint(-10, 10)),
                reason='Routine check-up',
                status=random.choice([c for c, _ in Appointment.STATUS_CHOICES]),
            )
            appointments.append(appt)
        return appointments

    def create_prescriptions(self, appointments):
        now = timezone.now()
        for appt in appointments:
            Prescription.objects.create(
                patient=appt.patient,
                doctor=appt.doctor,
                appointment=appt,
                medicine_name=random.choice(['Paracetamol', 'Amoxicillin', 'Metformin', 'Atorvastatin']),
                dosage='500mg',
                frequency='Twice a day',
                reminder_times=['09:00', '21:00'],
                start_date=now - timedelta(days=1),
                end_date=now + timedelta(days=random.randint(3, 14)),
                reminder_medium=random.choice([c for c, _ in Prescription.MEDIUM_CHOICES]),
            )

    def create_donations(self, patients, centers):
        today = timezone.now()
        for patient in patients:
            if patient.total_donations:
                continue
            for n in range(random.randint(0, 6)):
                register_donation(
                    patient.id,
                    center_id=random.choice(centers).id,
                    date=(today - timedelta(days=45 * n)).isoformat(),
                )
