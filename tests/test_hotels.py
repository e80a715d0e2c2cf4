from unittest import mock

import pytest
import requests
from django.test import override_settings

from apps.hotels.exceptions import UpstreamError
from apps.hotels.services.lite_api import LiteAPIClient

pytestmark = pytest.mark.django_db

REQUEST = 'apps.hotels.services.lite_api.requests.request'


def fake_response(payload, status_code=200):
    response = mock.Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.json.return_value = payload
    return response


RATE_SEARCH = {
    'checkin': '2026-02-01',
    'checkout': '2026-02-05',
    'currency': 'eur',
    'guestNationality': 'gb',
    'occupancies': [{'adults': 2}],
    'countryCode': 'CH',
}


def rate(hotel_id, amount):
    return {
        'hotelId': hotel_id,
        'roomTypes': [{'rates': [{'retailRate': {'total': [{'amount': amount, 'currency': 'EUR'}]}}]}],
    }


def test_hotel_detail_is_proxied_and_cached(client_for, owner):
    client = client_for(owner)
    with mock.patch(REQUEST, return_value=fake_response({'data': {'id': 'lp1', 'name': 'Chalet Blanc'}})) as request:
        first = client.get('/api/v1/hotels/lp1/')
        second = client.get('/api/v1/hotels/lp1/')

    assert first.status_code == 200
    assert first.json()['data'] == {'data': {'id': 'lp1', 'name': 'Chalet Blanc'}}
    assert second.json()['data'] == first.json()['data']
    assert request.call_count == 1
    method, url = request.call_args.args
    assert (method, url) == ('GET', 'https://api.liteapi.travel/data/hotel')
    assert request.call_args.kwargs['params'] == {'hotelId': 'lp1'}
    assert request.call_args.kwargs['headers']['X-API-Key'] == 'test-lite-api-key'


def test_hotel_list_forwards_filters(client_for, owner):
    with mock.patch(REQUEST, return_value=fake_response({'data': []})) as request:
        response = client_for(owner).get('/api/v1/hotels/', {'countryCode': 'FR', 'cityName': 'Chamonix', 'limit': 5})

    assert response.status_code == 200
    assert request.call_args.kwargs['params'] == {
        'limit': 5, 'offset': 0, 'countryCode': 'FR', 'cityName': 'Chamonix',
    }


def test_cities_uppercases_country_code(client_for, owner):
    with mock.patch(REQUEST, return_value=fake_response({'data': []})) as request:
        response = client_for(owner).get('/api/v1/hotels/cities/ch/')

    assert response.status_code == 200
    assert request.call_args.kwargs['params'] == {'countryCode': 'CH'}


def test_hotels_require_authentication(api_client):
    response = api_client.get('/api/v1/hotels/countries/')

    assert response.status_code == 401


def test_upstream_server_error_becomes_502(client_for, owner):
    with mock.patch(REQUEST, return_value=fake_response({'message': 'boom'}, status_code=500)):
        response = client_for(owner).get('/api/v1/hotels/facilities/')

    assert response.status_code == 502
    assert response.json()['error'] == {'code': 'UPSTREAM_ERROR', 'message': 'boom'}


def test_upstream_client_error_keeps_status(client_for, owner):
    payload = {'error': {'message': 'hotel not found'}}
    with mock.patch(REQUEST, return_value=fake_response(payload, status_code=404)):
        response = client_for(owner).get('/api/v1/hotels/missing/')

    assert response.status_code == 404
    assert response.json()['error']['message'] == 'hotel not found'


def test_upstream_errors_are_not_cached(client_for, owner):
    client = client_for(owner)
    with mock.patch(REQUEST, side_effect=requests.ConnectionError('down')):
        assert client.get('/api/v1/hotels/countries/').status_code == 502
    with mock.patch(REQUEST, return_value=fake_response({'data': [{'code': 'CH'}]})):
        assert client.get('/api/v1/hotels/countries/').status_code == 200


@override_settings(LITE_API_KEY='')
def test_missing_api_key_is_503():
    with mock.patch(REQUEST) as request, pytest.raises(UpstreamError) as exc_info:
        LiteAPIClient().list_facilities()

    assert exc_info.value.status_code == 503
    request.assert_not_called()


def test_rate_search_merges_hotel_details(client_for, owner):
    upstream = {
        'data': [rate('lp1', 820.5), rate('lp2', 410)],
        'hotels': [{'id': 'lp1', 'name': 'Chalet Blanc', 'rating': 4.6}],
        'searchId': 'srch-1',
    }
    with mock.patch(REQUEST, return_value=fake_response(upstream)) as request:
        response = client_for(owner).post('/api/v1/hotels/rates/', RATE_SEARCH, format='json')

    assert response.status_code == 200
    data = response.json()['data']
    assert data['nights'] == 4
    assert data['currency'] == 'EUR'
    assert data['search_id'] == 'srch-1'
    assert data['total_results'] == 2
    assert data['hotels'][0]['name'] == 'Chalet Blanc'
    assert data['hotels'][1]['name'] is None
    assert data['price_range'] == {
        'min': {'amount': 410, 'currency': 'EUR'},
        'max': {'amount': 820.5, 'currency': 'EUR'},
    }
    body = request.call_args.kwargs['json']
    assert body['checkin'] == '2026-02-01'
    assert body['guestNationality'] == 'GB'


def test_rate_search_without_results(client_for, owner):
    with mock.patch(REQUEST, return_value=fake_response({'data': []})):
        response = client_for(owner).post('/api/v1/hotels/rates/', RATE_SEARCH, format='json')

    assert response.json()['data']['price_range'] is None


@pytest.mark.parametrize('override', [
    {'checkout': '2026-02-01'},
    {'checkin': '01/02/2026'},
    {'occupancies': []},
    {'countryCode': None},
])
def test_rate_search_validation(client_for, owner, override):
    payload = {**RATE_SEARCH, **override}
    payload = {key: value for key, value in payload.items() if value is not None}

    with mock.patch(REQUEST) as request:
        response = client_for(owner).post('/api/v1/hotels/rates/', payload, format='json')

    assert response.status_code == 400
    assert response.json()['error']['code'] == 'VALIDATION_ERROR'
    request.assert_not_called()
