"""
Request validation for the hotel proxy endpoints.

Field names follow the provider's camelCase so bodies can be forwarded as-is.
"""
from rest_framework import serializers


class HotelListQuerySerializer(serializers.Serializer):
    countryCode = serializers.CharField(max_length=2, required=False)
    cityName = serializers.CharField(max_length=100, required=False)
    limit = serializers.IntegerField(min_value=1, max_value=200, default=50)
    offset = serializers.IntegerField(min_value=0, default=0)


class ReviewQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(min_value=1, max_value=100, default=10)
    offset = serializers.IntegerField(min_value=0, default=0)


class OccupancySerializer(serializers.Serializer):
    adults = serializers.IntegerField(min_value=1)
    children = serializers.ListField(child=serializers.IntegerField(min_value=0, max_value=17), required=False)


class RateSearchSerializer(serializers.Serializer):
    checkin = serializers.DateField(input_formats=['%Y-%m-%d'])
    checkout = serializers.DateField(input_formats=['%Y-%m-%d'])
    currency = serializers.CharField(min_length=3, max_length=3)
    guestNationality = serializers.CharField(min_length=2, max_length=2)
    occupancies = OccupancySerializer(many=True, allow_empty=False)
    hotelIds = serializers.ListField(child=serializers.CharField(), required=False)
    countryCode = serializers.CharField(max_length=2, required=False)
    cityName = serializers.CharField(max_length=100, required=False)
    limit = serializers.IntegerField(min_value=1, max_value=200, required=False)

    def validate(self, attrs):
        if attrs['checkin'] >= attrs['checkout']:
            raise serializers.ValidationError('Check-in date must be before check-out date.')
        if not (attrs.get('hotelIds') or attrs.get('countryCode') or attrs.get('cityName')):
            raise serializers.ValidationError('Provide hotelIds, countryCode or cityName to search.')
        attrs['currency'] = attrs['currency'].upper()
        attrs['guestNationality'] = attrs['guestNationality'].upper()
        return attrs
