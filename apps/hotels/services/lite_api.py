"""
Client for the LiteAPI hotel data and rates endpoints.

Metadata responses are cached with the Django cache framework: hotel data
for an hour, countries and facilities for a day. Rate searches are never
cached since prices move.
"""
import logging
from urllib.parse import urlencode

import requests
from django.conf import settings
from django.core.cache import cache
from rest_framework import status

from apps.hotels.exceptions import UpstreamError

logger = logging.getLogger(__name__)

HOTEL_CACHE_TTL = 3600
REVIEW_CACHE_TTL = 1800
REFERENCE_CACHE_TTL = 86400
CACHE_PREFIX = 'liteapi'


class LiteAPIClient:
    """
    Thin wrapper around the LiteAPI REST endpoints.

    Every method returns the decoded JSON body of the provider response and
    raises ``UpstreamError`` on transport failures or non-2xx replies.
    """

    def __init__(self, api_key=None, base_url=None, timeout=None):
        self.api_key = api_key if api_key is not None else settings.LITE_API_KEY
        self.base_url = (base_url or settings.LITE_API_BASE_URL).rstrip('/')
        self.timeout = timeout or settings.LITE_API_TIMEOUT

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def list_hotels(self, country_code=None, city_name=None, limit=50, offset=0):
        params = {'limit': limit, 'offset': offset}
        if country_code:
            params['countryCode'] = country_code
        if city_name:
            params['cityName'] = city_name
        return self._cached_get('/data/hotels', params, HOTEL_CACHE_TTL)

    def get_hotel(self, hotel_id):
        return self._cached_get('/data/hotel', {'hotelId': hotel_id}, HOTEL_CACHE_TTL)

    def get_reviews(self, hotel_id, limit=10, offset=0):
        params = {'hotelId': hotel_id, 'limit': limit, 'offset': offset}
        return self._cached_get('/data/reviews', params, REVIEW_CACHE_TTL)

    def list_countries(self):
        return self._cached_get('/data/countries', {}, REFERENCE_CACHE_TTL)

    def list_cities(self, country_code):
        return self._cached_get('/data/cities', {'countryCode': country_code}, REFERENCE_CACHE_TTL)

    def list_facilities(self):
        return self._cached_get('/data/facilities', {}, REFERENCE_CACHE_TTL)

    def search_rates(self, payload):
        """
        Search live rates and merge each rate with its hotel details.

        Parameters
        ----------
        payload : dict
            Body for ``POST /hotels/rates``; ``checkin`` and ``checkout`` are
            ``date`` objects, the rest is passed through.

        Returns
        -------
        dict
            ``hotels`` (rates merged with name/photo/address/rating),
            ``search_id``, ``currency``, ``checkin``, ``checkout``, ``nights``,
            ``total_results`` and ``price_range`` (None without results).
        """
        checkin, checkout = payload['checkin'], payload['checkout']
        body = {**payload, 'checkin': checkin.isoformat(), 'checkout': checkout.isoformat()}
        raw = self._request('POST', '/hotels/rates', json=body)

        details = {hotel.get('id'): hotel for hotel in raw.get('hotels') or []}
        rates = raw.get('data') or []
        hotels = []
        for rate in rates:
            hotel = details.get(rate.get('hotelId'), {})
            hotels.append({
                **rate,
                'name': hotel.get('name'),
                'main_photo': hotel.get('main_photo'),
                'address': hotel.get('address'),
                'rating': hotel.get('rating'),
            })

        amounts = [_headline_amount(rate) for rate in rates]
        return {
            'hotels': hotels,
            'search_id': raw.get('searchId'),
            'currency': payload['currency'],
            'checkin': checkin.isoformat(),
            'checkout': checkout.isoformat(),
            'nights': _nights(checkin, checkout),
            'total_results': len(rates),
            'price_range': {
                'min': {'amount': min(amounts), 'currency': payload['currency']},
                'max': {'amount': max(amounts), 'currency': payload['currency']},
            } if amounts else None,
        }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _cached_get(self, path, params, ttl):
        cache_key = f'{CACHE_PREFIX}:{path}:{urlencode(sorted(params.items()))}'
        cached = cache.get(cache_key)
        if cached is not None:
            return cached

        data = self._request('GET', path, params=params)
        cache.set(cache_key, data, ttl)
        return data

    def _request(self, method, path, **kwargs):
        if not self.api_key:
            logger.error('LITE_API_KEY is not configured')
            raise UpstreamError('Hotel search is not configured.', status.HTTP_503_SERVICE_UNAVAILABLE)

        url = f'{self.base_url}{path}'
        try:
            response = requests.request(
                method,
                url,
                headers={
                    'X-API-Key': self.api_key,
                    'Accept': 'application/json',
                },
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as exc:
            logger.error('LiteAPI %s %s failed: %s', method, path, exc)
            raise UpstreamError() from exc

        if not response.ok:
            message = _error_message(response)
            logger.warning('LiteAPI %s %s returned %d: %s', method, path, response.status_code, message)
            upstream_status = response.status_code
            if upstream_status in (401, 403) or upstream_status >= 500:
                upstream_status = status.HTTP_502_BAD_GATEWAY
            raise UpstreamError(message, upstream_status)

        try:
            return response.json()
        except ValueError as exc:
            logger.error('LiteAPI %s %s returned invalid JSON', method, path)
            raise UpstreamError('The hotel provider returned an invalid response.') from exc


def _error_message(response):
    try:
        body = response.json()
    except ValueError:
        return f'Hotel provider error ({response.status_code}).'
    error = body.get('error') if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get('message'):
        return error['message']
    if isinstance(body, dict) and body.get('message'):
        return body['message']
    return f'Hotel provider error ({response.status_code}).'


def _headline_amount(rate):
    """First room's first retail total, the price shown on a search result."""
    try:
        return rate['roomTypes'][0]['rates'][0]['retailRate']['total'][0]['amount'] or 0
    except (KeyError, IndexError, TypeError):
        return 0


def _nights(checkin, checkout):
    return (checkout - checkin).days
