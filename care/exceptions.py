"""
Error taxonomy and the project-wide DRF exception handler.

Services raise the domain errors below; every error leaving the API,
whether raised by a service, by DRF itself (authentication, permission,
throttling) or unhandled, is rendered as
``{"success": false, "message": <text>}``.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class ValidationError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid request.'
    default_code = 'validation_error'


class NotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


class AuthorizationError(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You are not allowed to act on this resource.'
    default_code = 'forbidden'


class InternalError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal server error.'
    default_code = 'server_error'


def _flatten(detail) -> str:
    if isinstance(detail, dict):
        if 'detail' in detail:
            return _flatten(detail['detail'])
        parts = [f"{k}: {_flatten(v)}" for k, v in detail.items()]
        return '; '.join(parts)
    if isinstance(detail, (list, tuple)):
        return ' '.join(_flatten(d) for d in detail)
    return str(detail)


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('unhandled error: %s', exc)
        return Response({'success': False, 'message': str(exc)}, status=500)
    headers = {k: resp[k] for k in ('WWW-Authenticate', 'Retry-After') if resp.has_header(k)}
    return Response({'success': False, 'message': _flatten(resp.data)}, status=resp.status_code, headers=headers)
