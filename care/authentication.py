"""
Custom authentication backend for token-based auth.

This module defines a subclass of Django REST framework's
``TokenAuthentication`` that pins the ``keyword`` used in the
``Authorization`` header.  Keeping it apart from the views avoids
circular imports when DRF loads authentication classes at startup.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """Token authentication using the ``Token`` keyword."""

    keyword = 'Token'
