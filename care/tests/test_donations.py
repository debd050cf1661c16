"""
Tests for blood-donation registration, centers and leaderboards.

The API tests use Django REST Framework's APIClient within the
APITestCase base class; rule-level checks call the donation service
directly.

To run the tests:

```
pytest -q care/tests
```
"""
from datetime import date, timedelta
from unittest import mock

from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from ..exceptions import NotFoundError, ValidationError
from ..models import AuditEvent, Donation, DonationCenter, User
from ..services import donations as donation_service
from ..services.donations import award_badges, create_center, register_donation


class DonationRulesTests(APITestCase):
    def setUp(self) -> None:
        self.donor = User.objects.create_user(username="donor1", password="P@ssw0rd1", role="patient",
                                              first_name="Asha", last_name="Rao")
        self.center = create_center(name="City Hospital", city="Pune")

    def register(self, day: str, user=None, center=None):
        return register_donation((user or self.donor).id, center_id=(center or self.center).id, date=day)

    def test_totals_increase_by_one_for_user_and_center(self):
        user, center = self.register("2025-01-10")
        self.assertEqual(user.total_donations, 1)
        self.assertEqual(center.total_donations, 1)
        user, center = self.register("2025-03-02")
        self.assertEqual(user.total_donations, 2)
        self.assertEqual(center.total_donations, 2)
        self.assertEqual(Donation.objects.filter(user=self.donor).count(), 2)

    def test_same_month_counts_streak_once(self):
        self.register("2025-01-10")
        user, _ = self.register("2025-01-25")
        self.assertEqual(user.total_donations, 2)
        self.assertEqual(user.streak_count, 1)

    def test_different_months_count_streak_twice(self):
        self.register("2025-01-10")
        user, _ = self.register("2025-02-03")
        self.assertEqual(user.total_donations, 2)
        self.assertEqual(user.streak_count, 2)

    def test_same_month_in_another_year_is_a_new_month(self):
        self.register("2024-01-10")
        user, _ = self.register("2025-01-10")
        self.assertEqual(user.streak_count, 2)

    def test_streak_has_no_gap_reset(self):
        for day in ("2024-01-05", "2024-06-05", "2025-02-05"):
            user, _ = self.register(day)
        self.assertEqual(user.streak_count, 3)

    def test_badges_awarded_once_at_milestones(self):
        start = date(2024, 1, 1)
        seen = {}
        for n in range(1, 12):
            user, _ = self.register((start + timedelta(days=40 * n)).isoformat())
            seen[n] = list(user.badges)
        self.assertEqual(seen[1], ["First Donation"])
        self.assertEqual(seen[4], ["First Donation"])
        self.assertEqual(seen[5], ["First Donation", "5 Donations"])
        self.assertEqual(seen[10], ["First Donation", "5 Donations", "10 Donations"])
        # the 11th donation neither duplicates nor removes anything
        self.assertEqual(seen[11], seen[10])
        self.donor.refresh_from_db()
        self.assertEqual(self.donor.total_donations, 11)
        self.assertEqual(len(self.donor.badges), len(set(self.donor.badges)))

    def test_award_badges_is_idempotent(self):
        self.assertEqual(award_badges(["First Donation"], 1), ["First Donation"])
        self.assertEqual(award_badges([], 2), [])
        self.assertEqual(award_badges(None, 5), ["5 Donations"])

    def test_repeat_donor_is_listed_once(self):
        self.register("2025-01-10")
        _, center = self.register("2025-02-10")
        self.assertEqual(list(center.donors.values_list("id", flat=True)), [self.donor.id])
        self.assertEqual(center.total_donations, 2)

    def test_center_counts_only_its_own_donations(self):
        other = create_center(name="Red Cross")
        self.register("2025-01-10")
        self.register("2025-02-10", center=other)
        self.center.refresh_from_db()
        other.refresh_from_db()
        self.assertEqual(self.center.total_donations, 1)
        self.assertEqual(other.total_donations, 1)
        self.donor.refresh_from_db()
        self.assertEqual(self.donor.total_donations, 2)

    def test_missing_fields_rejected(self):
        with self.assertRaises(ValidationError):
            register_donation(self.donor.id, center_id=None, date="2025-01-10")
        with self.assertRaises(ValidationError):
            register_donation(self.donor.id, center_id=self.center.id, date="")

    def test_invalid_date_rejected(self):
        with self.assertRaises(ValidationError):
            register_donation(self.donor.id, center_id=self.center.id, date="not-a-date")
        self.assertFalse(Donation.objects.exists())

    def test_unknown_user_or_center(self):
        with self.assertRaises(NotFoundError):
            register_donation(999999, center_id=self.center.id, date="2025-01-10")
        with self.assertRaises(NotFoundError):
            register_donation(self.donor.id, center_id=999999, date="2025-01-10")
        with self.assertRaises(NotFoundError):
            register_donation(self.donor.id, center_id="abc", date="2025-01-10")

    def test_registration_is_audited(self):
        self.register("2025-01-10")
        event = AuditEvent.objects.get(action="donation_register")
        self.assertEqual(event.user_id, self.donor.id)
        self.assertEqual(event.object_id, self.center.id)

    def test_registration_broadcasts_after_commit(self):
        sent = []

        class FakeLayer:
            async def group_send(self, group, event):
                sent.append((group, event))

        with mock.patch.object(donation_service, "get_channel_layer", return_value=FakeLayer()):
            with self.captureOnCommitCallbacks(execute=True):
                self.register("2025-01-10")
        self.assertEqual(len(sent), 1)
        group, event = sent[0]
        self.assertEqual(group, "updates")
        self.assertEqual(event["type"], "donation.registered")
        self.assertEqual(event["centerId"], self.center.id)
        self.assertEqual(event["userTotal"], 1)

    def test_create_center_requires_name(self):
        with self.assertRaises(ValidationError):
            create_center(name="   ")

    def test_create_center_strips_markup(self):
        center = create_center(name="<b>Lifeline</b>", city="<script>x</script>Pune")
        self.assertEqual(center.name, "Lifeline")
        self.assertNotIn("<", center.city)

    def test_create_center_keeps_plain_text_characters(self):
        center = create_center(name="St. John & Mary Hospital", address="Block <5>", contact_number="020 > 1")
        center.refresh_from_db()
        self.assertEqual(center.name, "St. John & Mary Hospital")
        self.assertEqual(center.address, "Block <5>")
        self.assertEqual(center.contact_number, "020 > 1")

    def test_history_keeps_registration_order(self):
        self.register("2025-03-10")
        self.register("2025-01-10")
        history = donation_service.donation_history(self.donor.id)
        dates = [d["date"][:10] for d in history["donations"]]
        self.assertEqual(dates, ["2025-03-10", "2025-01-10"])


class DonationAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin_user = User.objects.create_user(username="admin1", password="P@ssw0rd1", role="admin")
        self.patient = User.objects.create_user(username="patient1", password="P@ssw0rd1", role="patient",
                                                first_name="Ravi", last_name="Kumar", email="ravi@example.com")
        self.doctor = User.objects.create_user(username="doctor1", password="P@ssw0rd1", role="doctor")

    def authenticate(self, user: User) -> APIClient:
        """Return an authenticated APIClient for the given user."""
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    def test_create_center_then_donate(self):
        admin = self.authenticate(self.admin_user)
        r = admin.post("/api/v1/donation/newCentre", {"name": "City Hospital"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertTrue(r.data["success"])
        center = r.data["center"]
        self.assertEqual(center["name"], "City Hospital")
        self.assertEqual(center["totalDonations"], 0)
        self.assertEqual(center["donors"], [])

        patient = self.authenticate(self.patient)
        r = patient.post("/api/v1/donation/donate", {"centerId": center["id"], "date": "2025-05-04"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data["user"]["totalDonations"], 1)
        self.assertEqual(r.data["user"]["streakCount"], 1)
        self.assertEqual(r.data["user"]["badges"], ["First Donation"])
        self.assertEqual(r.data["center"]["totalDonations"], 1)
        self.assertEqual(r.data["center"]["donors"], [self.patient.id])

    def test_create_center_without_name(self):
        admin = self.authenticate(self.admin_user)
        r = admin.post("/api/v1/donation/newCentre", {"city": "Pune"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data, {"success": False, "message": "Center name is required."})

    def test_only_admin_creates_centers(self):
        r = self.authenticate(self.patient).post("/api/v1/donation/newCentre", {"name": "X"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(r.data["success"])
        self.assertFalse(DonationCenter.objects.exists())

    def test_donate_requires_patient(self):
        center = create_center(name="City Hospital")
        r = self.authenticate(self.doctor).post("/api/v1/donation/donate", {"centerId": center.id, "date": "2025-05-04"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
        r = APIClient().post("/api/v1/donation/donate", {"centerId": center.id, "date": "2025-05-04"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(r.data["success"])

    def test_donate_missing_fields(self):
        r = self.authenticate(self.patient).post("/api/v1/donation/donate", {"date": "2025-05-04"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data["message"], "Missing required fields.")

    def test_donate_unknown_center(self):
        r = self.authenticate(self.patient).post("/api/v1/donation/donate", {"centerId": 4242, "date": "2025-05-04"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(r.data, {"success": False, "message": "Donation center not found."})

    def test_history_resolves_centers(self):
        center = create_center(name="City Hospital", city="Pune", address="12 MG Road", contact_number="020-1")
        register_donation(self.patient.id, center_id=center.id, date="2025-01-10")
        register_donation(self.patient.id, center_id=center.id, date="2025-02-10")
        r = self.authenticate(self.patient).get("/api/v1/donation/history")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        h = r.data["donationHistory"]
        self.assertEqual(h["firstName"], "Ravi")
        self.assertEqual(h["totalDonations"], 2)
        self.assertEqual(h["streakCount"], 2)
        self.assertEqual(h["badges"], ["First Donation"])
        self.assertEqual(len(h["donations"]), 2)
        self.assertEqual(h["donations"][0]["center"], {
            "id": center.id, "name": "City Hospital", "city": "Pune",
            "address": "12 MG Road", "contactNumber": "020-1",
        })
        self.assertTrue(h["donations"][0]["date"].startswith("2025-01-10"))

    def test_centers_sorted_by_total_with_donors(self):
        quiet = create_center(name="Quiet")
        busy = create_center(name="Busy")
        register_donation(self.patient.id, center_id=busy.id, date="2025-01-10")
        r = APIClient().get("/api/v1/donation/centers")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        names = [c["name"] for c in r.data["centers"]]
        self.assertEqual(names, ["Busy", "Quiet"])
        self.assertEqual(r.data["centers"][0]["donors"], [{
            "id": self.patient.id, "firstName": "Ravi", "lastName": "Kumar", "email": "ravi@example.com",
        }])
        self.assertEqual(r.data["centers"][1]["donors"], [])
        self.assertEqual(quiet.total_donations, 0)

    def test_top_donors_limited_to_ten(self):
        center = create_center(name="City Hospital")
        donors = []
        for i in range(12):
            u = User.objects.create_user(username=f"d{i}", password="P@ssw0rd1", role="patient")
            for n in range(i + 1):
                register_donation(u.id, center_id=center.id, date=f"2024-{(n % 12) + 1:02d}-15")
            donors.append(u)
        User.objects.create_user(username="never", password="P@ssw0rd1", role="patient")

        r = APIClient().get("/api/v1/donation/top-donors")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        rows = r.data["donors"]
        self.assertEqual(len(rows), 10)
        self.assertEqual(rows[0]["id"], donors[-1].id)
        self.assertEqual(rows[0]["totalDonations"], 12)
        totals = [row["totalDonations"] for row in rows]
        self.assertEqual(totals, sorted(totals, reverse=True))
        self.assertEqual(set(rows[0]), {"id", "firstName", "lastName", "totalDonations", "badges"})

    def test_unhandled_error_becomes_500(self):
        with mock.patch("care.views.donations.top_donors", side_effect=RuntimeError("db went away")):
            r = APIClient().get("/api/v1/donation/top-donors")
        self.assertEqual(r.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(r.data, {"success": False, "message": "db went away"})
