import logging

from django.db import DatabaseError, connections
from django.http import JsonResponse
from django.views.decorators.http import require_GET

from care.models import DonationCenter

logger = logging.getLogger(__name__)


@require_GET
def healthz(request):
    """Liveness plus a database round trip; used by load balancers."""
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
        centers = DonationCenter.objects.count()
    except DatabaseError as e:
        logger.error('health check failed: %s', e)
        return JsonResponse({'success': False, 'message': str(e)}, status=503)
    return JsonResponse({'ok': True, 'db': bool(row and row[0] == 1), 'centers': centers})
