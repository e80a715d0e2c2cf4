"""
Authenticated pass-through to the hotel provider.

    GET  /api/v1/hotels/?countryCode&cityName&limit&offset
    GET  /api/v1/hotels/{hotel_id}/
    GET  /api/v1/hotels/{hotel_id}/reviews/?limit&offset
    GET  /api/v1/hotels/countries/
    GET  /api/v1/hotels/cities/{country_code}/
    GET  /api/v1/hotels/facilities/
    POST /api/v1/hotels/rates/
"""
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from apps.hotels.serializers import HotelListQuerySerializer, RateSearchSerializer, ReviewQuerySerializer
from apps.hotels.services.lite_api import LiteAPIClient
from common.responses import success_response


class HotelViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]
    lookup_field = 'hotel_id'

    def get_client(self):
        return LiteAPIClient()

    def list(self, request):
        query = HotelListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data
        data = self.get_client().list_hotels(
            country_code=params.get('countryCode'),
            city_name=params.get('cityName'),
            limit=params['limit'],
            offset=params['offset'],
        )
        return success_response(data)

    def retrieve(self, request, hotel_id=None):
        return success_response(self.get_client().get_hotel(hotel_id))

    @action(detail=True, methods=['get'])
    def reviews(self, request, hotel_id=None):
        query = ReviewQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return success_response(self.get_client().get_reviews(hotel_id, **query.validated_data))

    @action(detail=False, methods=['get'])
    def countries(self, request):
        return success_response(self.get_client().list_countries())

    @action(detail=False, methods=['get'], url_path=r'cities/(?P<country_code>[A-Za-z]{2})')
    def cities(self, request, country_code=None):
        return success_response(self.get_client().list_cities(country_code.upper()))

    @action(detail=False, methods=['get'])
    def facilities(self, request):
        return success_response(self.get_client().list_facilities())

    @action(detail=False, methods=['post'])
    def rates(self, request):
        serializer = RateSearchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return success_response(self.get_client().search_rates(serializer.validated_data))
