from rest_framework import serializers

# Presence is checked by the donation service so that every missing-field
# error carries the same message.
class DonationCreateSerializer(serializers.Serializer):
    centerId = serializers.CharField(required=False, allow_blank=True, max_length=32)
    date = serializers.CharField(required=False, allow_blank=True, max_length=64)

class CenterCreateSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    city = serializers.CharField(required=False, allow_blank=True, max_length=100)
    address = serializers.CharField(required=False, allow_blank=True, max_length=255)
    contactNumber = serializers.CharField(required=False, allow_blank=True, max_length=32)
