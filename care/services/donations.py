"""
Blood-donation business rules.

Registering a donation updates three things at once: the donor's list
and aggregates (total, month streak, milestone badges), and the
center's aggregates (total, distinct donors).  Both rows are locked and
written inside one transaction so concurrent registrations for the same
donor or center cannot lose an increment.
"""
import logging
from typing import Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from care.exceptions import NotFoundError, ValidationError
from care.models import Donation, DonationCenter
from care.services.audit import log_action
from care.services.dates import parse_when
from care.services.sanitize import clean_text

User = get_user_model()

logger = logging.getLogger(__name__)

# (total donations, badge label); awarded when the total hits the value exactly
BADGE_MILESTONES = (
    (1, 'First Donation'),
    (5, '5 Donations'),
    (10, '10 Donations'),
)


def award_badges(badges: Optional[list], total: int) -> list:
    earned = list(badges or [])
    for threshold, label in BADGE_MILESTONES:
        if total == threshold and label not in earned:
            earned.append(label)
    return earned


def donated_in_month(user: User, when) -> bool:
    local = timezone.localtime(when)
    return Donation.objects.filter(user=user, date__year=local.year, date__month=local.month).exists()


def _lock(model, pk):
    try:
        pk = int(pk)
    except (TypeError, ValueError):
        return None
    return model.objects.select_for_update().filter(pk=pk).first()


def register_donation(user_id, *, center_id, date) -> tuple:
    """Record a donation by ``user_id`` at ``center_id`` on ``date``.

    Returns the updated ``(user, center)``.
    """
    if not center_id or not date:
        raise ValidationError('Missing required fields.')
    when = parse_when(date)
    if when is None:
        raise ValidationError('Donation date must be a valid date.')

    with transaction.atomic():
        user = _lock(User, user_id)
        if user is None:
            raise NotFoundError('User not found.')
        center = _lock(DonationCenter, center_id)
        if center is None:
            raise NotFoundError('Donation center not found.')

        already_this_month = donated_in_month(user, when)

        Donation.objects.create(user=user, center=center, date=when)
        user.total_donations += 1
        if not already_this_month:
            user.streak_count += 1
        user.badges = award_badges(user.badges, user.total_donations)
        user.save(update_fields=['total_donations', 'streak_count', 'badges'])

        center.total_donations += 1
        center.save(update_fields=['total_donations'])
        # add() is a no-op for an existing donor
        center.donors.add(user)

        log_action(user=user, action='donation_register', object_type='donation_center', object_id=center.id,
                   detail={'date': when.isoformat(), 'total': user.total_donations})
        transaction.on_commit(lambda: _broadcast_registration(user, center))

    logger.info('donation registered: user=%s center=%s total=%s streak=%s',
                user.id, center.id, user.total_donations, user.streak_count)
    return user, center


def _broadcast_registration(user: User, center: DonationCenter) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    event = {
        "type": "donation.registered",
        "userId": user.id,
        "centerId": center.id,
        "userTotal": user.total_donations,
        "centerTotal": center.total_donations,
        "ts": timezone.now().isoformat(),
    }
    try:
        async_to_sync(channel_layer.group_send)("updates", event)
    except Exception:
        logger.warning('could not broadcast donation for center %s', center.id, exc_info=True)


def create_center(*, name, city=None, address=None, contact_number=None) -> DonationCenter:
    name = clean_text(name)
    if not name:
        raise ValidationError('Center name is required.')
    center = DonationCenter.objects.create(
        name=name,
        city=clean_text(city),
        address=clean_text(address),
        contact_number=clean_text(contact_number),
        total_donations=0,
    )
    logger.info('donation center created: id=%s name=%s', center.id, center.name)
    return center


# ---------------------------------------------------------------------------
# Serialisation
# ---------------------------------------------------------------------------

def format_center_ref(center: Optional[DonationCenter]) -> Optional[dict]:
    if center is None:
        return None
    return {
        'id': center.id,
        'name': center.name,
        'city': center.city,
        'address': center.address,
        'contactNumber': center.contact_number,
    }


def format_center(center: DonationCenter, *, resolve_donors: bool = False) -> dict:
    if resolve_donors:
        donors = [{
            'id': u.id,
            'firstName': u.first_name,
            'lastName': u.last_name,
            'email': u.email,
        } for u in center.donors.all()]
    else:
        donors = [u.id for u in center.donors.all()]
    return {
        **format_center_ref(center),
        'totalDonations': center.total_donations,
        'donors': donors,
        'createdAt': center.created_at.isoformat() if center.created_at else None,
    }


def format_donor(user: User, *, resolve_centers: bool = False) -> dict:
    donations = []
    for d in user.donations.all():
        donations.append({
            'date': d.date.isoformat(),
            'center': format_center_ref(d.center) if resolve_centers else d.center_id,
        })
    return {
        'id': user.id,
        'firstName': user.first_name,
        'lastName': user.last_name,
        'email': user.email,
        'totalDonations': user.total_donations,
        'streakCount': user.streak_count,
        'badges': list(user.badges or []),
        'donations': donations,
    }


# ---------------------------------------------------------------------------
# Read-only projections
# ---------------------------------------------------------------------------

def donation_history(user_id) -> dict:
    user = User.objects.filter(pk=user_id).prefetch_related('donations__center').first()
    if user is None:
        raise NotFoundError('User not found.')
    return format_donor(user, resolve_centers=True)


def list_centers() -> list:
    qs = DonationCenter.objects.prefetch_related('donors').order_by('-total_donations', 'id')
    return [format_center(c, resolve_donors=True) for c in qs]


def top_donors(limit: Optional[int] = None) -> list:
    limit = limit or settings.TOP_DONORS_LIMIT
    qs = (User.objects.filter(total_donations__gt=0)
          .order_by('-total_donations', 'id')
          .only('id', 'first_name', 'last_name', 'total_donations', 'badges')[:limit])
    return [{
        'id': u.id,
        'firstName': u.first_name,
        'lastName': u.last_name,
        'totalDonations': u.total_donations,
        'badges': list(u.badges or []),
    } for u in qs]
