"""
Blood-donation endpoints.

Patients register donations and read their own history; administrators
add donation centers.  The centers list and the top-donors leaderboard
are public.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from care.permissions import IsAdminRole, IsPatientRole
from care.serializers.donation import CenterCreateSerializer, DonationCreateSerializer
from care.services.donations import (
    create_center,
    donation_history,
    format_center,
    format_donor,
    list_centers,
    register_donation,
    top_donors,
)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPatientRole])
def donate(request):
    """Register a donation for the calling patient."""
    s = DonationCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user, center = register_donation(
        request.user.id,
        center_id=s.validated_data.get('centerId'),
        date=s.validated_data.get('date'),
    )
    return Response({
        'success': True,
        'message': 'Donation registered successfully.',
        'user': format_donor(user),
        'center': format_center(center),
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def new_centre(request):
    s = CenterCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    center = create_center(
        name=vd.get('name'),
        city=vd.get('city'),
        address=vd.get('address'),
        contact_number=vd.get('contactNumber'),
    )
    return Response({
        'success': True,
        'message': 'Donation center added successfully.',
        'center': format_center(center),
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientRole])
def history(request):
    return Response({'success': True, 'donationHistory': donation_history(request.user.id)})


@api_view(['GET'])
@permission_classes([AllowAny])
def centers(request):
    """All centers with their donors, busiest first."""
    return Response({'success': True, 'centers': list_centers()})


@api_view(['GET'])
@permission_classes([AllowAny])
def leaderboard(request):
    return Response({'success': True, 'donors': top_donors()})
