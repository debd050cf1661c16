from rest_framework.throttling import AnonRateThrottle


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


class ReminderRateThrottle(AnonRateThrottle):
    """Rate for the reminder webhook, keyed by caller IP."""
    scope = 'reminders'
