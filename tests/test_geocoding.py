import pytest
import requests

from conftest import feature
from services.geocoding import (
    fetch_geocoded, classify_feature, parse_feature, get_location_coordinates,
    reverse_geocode, get_location_name, parse_reverse_feature,
)


def test_missing_token_makes_no_request(no_token, fake_http):
    assert fetch_geocoded('Cape Town') == []
    assert fake_http.calls == []


def test_request_shape(mapbox_token, fake_http):
    fetch_geocoded('Cape Town/Point')
    [(url, params)] = fake_http.calls
    assert url.endswith('/mapbox.places/Cape%20Town%2FPoint.json')
    assert params == {
        'access_token': 'test-token',
        'country': 'ZA',
        'limit': 5,
        'types': 'address,poi,place,locality,neighborhood,region',
        'bbox': '16.4,-35.0,33.0,-22.0',
    }


def test_short_query_is_not_sent(mapbox_token, fake_http):
    assert fetch_geocoded(' C ') == []
    assert fake_http.calls == []


def test_parses_features_into_suggestions(mapbox_token, fake_http):
    fake_http.respond_with({'features': [
        feature('Long Street, Cape Town City Centre, Cape Town, Western Cape, South Africa',
                text='Long Street', place_type=['address'], center=(18.418, -33.923)),
    ]})
    [s] = fetch_geocoded('Long Street')
    assert s.kind == 'geocoded'
    assert s.name == 'Long Street'
    assert s.display_name == 'Long Street, Cape Town City Centre'
    assert s.location == 'Cape Town City Centre, Cape Town'
    assert s.tags == ['Address']
    assert s.description == 'Street address'
    assert s.coordinates == (18.418, -33.923)
    assert s.status is None


def test_classification():
    assert classify_feature(feature('Kirstenbosch', category='Botanical Garden, Park')) == 'trail'
    assert classify_feature(feature('Pipe Track Trail', place_type=['poi'])) == 'trail'
    assert classify_feature(feature('Silvermine Nature Reserve, Cape Town')) == 'trail'
    assert classify_feature(feature('Cafe Caprice, Camps Bay', place_type=['poi'])) == 'poi'
    assert classify_feature(feature('12 Main Road, Muizenberg', place_type=['address'])) == 'address'
    assert classify_feature(feature('Stellenbosch', place_type=['place'])) == 'location'


def test_missing_optional_fields_fall_through_to_location():
    s = parse_feature({'place_name': 'Somewhere'})
    assert s.tags == ['Location']
    assert s.description == 'Location in South Africa'
    assert s.location == 'South Africa'
    assert s.coordinates is None


def test_properties_null_is_tolerated():
    s = parse_feature({'place_name': 'Hout Bay, Cape Town', 'properties': None, 'place_type': None})
    assert s.display_name == 'Hout Bay, Cape Town'


def test_http_error_yields_nothing(mapbox_token, fake_http):
    fake_http.respond_with({'message': 'Not Authorized'}, status_code=401)
    assert fetch_geocoded('Cape Town') == []


def test_transport_error_yields_nothing(mapbox_token, fake_http):
    fake_http.handler = lambda url, params: requests.ConnectionError('offline')
    assert fetch_geocoded('Cape Town') == []


def test_malformed_body_yields_nothing(mapbox_token, fake_http):
    fake_http.respond_with(ValueError('not json'))
    assert fetch_geocoded('Cape Town') == []
    fake_http.respond_with({'features': None})
    assert fetch_geocoded('Cape Town') == []


def test_location_coordinates_are_cached(mapbox_token, fake_http):
    fake_http.respond_with({'features': [feature('Table Mountain, Cape Town', center=(18.40, -33.96))]})
    first = get_location_coordinates('Table Mountain')
    second = get_location_coordinates('table mountain')
    assert first == {'latitude': -33.96, 'longitude': 18.40, 'name': 'Table Mountain, Cape Town'}
    assert second == first
    assert len(fake_http.calls) == 1
    assert fake_http.calls[0][1]['limit'] == 1


def test_location_coordinates_without_token(no_token, fake_http):
    assert get_location_coordinates('Table Mountain') is None
    assert fake_http.calls == []


REVERSE_FEATURE = {
    'place_name': '5 Beach Road, Sea Point, Cape Town, 8005, Western Cape, South Africa',
    'text': 'Beach Road',
    'place_type': ['address'],
    'center': [18.38, -33.91],
    'context': [
        {'id': 'neighborhood.1', 'text': 'Sea Point'},
        {'id': 'postcode.2', 'text': '8005'},
        {'id': 'place.3', 'text': 'Cape Town'},
        {'id': 'region.4', 'text': 'Western Cape'},
        {'id': 'country.5', 'text': 'South Africa'},
    ],
}


def test_reverse_geocode_request_and_parse(mapbox_token, fake_http):
    fake_http.respond_with({'features': [REVERSE_FEATURE]})
    result = reverse_geocode((18.38, -33.91))
    url, params = fake_http.calls[0]
    assert url.endswith('/mapbox.places/18.38,-33.91.json')
    assert params['types'] == 'address,poi,locality,neighborhood,place,region,country'
    assert result['address'] == '5 Beach Road'
    assert result['city'] == 'Cape Town'
    assert result['state'] == 'Western Cape'
    assert result['fullAddress'] == '5 Beach Road, Sea Point, Cape Town, Western Cape, 8005, South Africa'
    assert result['name'] == 'Beach Road'
    assert result['type'] == 'address'


def test_reverse_geocode_city_from_place_name():
    result = parse_reverse_feature({
        'place_name': 'Sani Pass, KwaZulu-Natal Province, Republic of South Africa',
    }, (29.36, -29.58))
    assert result['city'] == 'Sani Pass'
    assert result['coordinates'] == [29.36, -29.58]
    assert result['type'] == 'location'


def test_reverse_geocode_house_number_not_repeated():
    result = parse_reverse_feature({
        'place_name': '12 Main Road, Muizenberg',
        'context': [{'id': 'address.1', 'text': '12'}, {'id': 'locality.2', 'text': 'Muizenberg'}],
    }, (18.47, -34.10))
    assert result['fullAddress'] == '12 Main Road, Muizenberg'


def test_location_name_without_token(no_token, fake_http):
    assert get_location_name((18.38, -33.91)) is None
    assert fake_http.calls == []


def test_reverse_geocode_no_features(mapbox_token, fake_http):
    fake_http.respond_with({'features': []})
    assert reverse_geocode((18.38, -33.91)) is None
    assert reverse_geocode(('x', 'y')) is None


@pytest.mark.parametrize('bad', [
    {'place_name': 'Cape Town, Western Cape', 'text': 5},
    {'place_name': 'Cape Town, Western Cape', 'place_type': 7},
    {'place_name': ['Cape Town'], 'text': 'Cape Town'},
    {'place_name': 'Cape Town', 'properties': 'park', 'center': 'nowhere', 'context': 3},
])
def test_wrongly_typed_fields_are_defaulted(mapbox_token, fake_http, bad):
    fake_http.respond_with({'features': [bad, feature('Hout Bay, Cape Town')]})
    results = fetch_geocoded('Cape Town')
    assert results[0].display_name.startswith('Cape Town')
    assert results[-1].display_name == 'Hout Bay, Cape Town'


def test_feature_without_place_name_uses_text(mapbox_token, fake_http):
    fake_http.respond_with({'features': [
        {'text': 'Silvermine', 'place_type': ['poi']},
        {'place_name': '', 'text': ''},
    ]})
    [s] = fetch_geocoded('Silvermine')
    assert s.name == 'Silvermine'
    assert s.display_name == 'Silvermine'
    assert s.location == 'South Africa'


def test_very_long_query_is_not_sent(mapbox_token, fake_http):
    assert fetch_geocoded('x' * 5000) == []
    assert fake_http.calls == []


def test_reverse_geocode_tolerates_wrong_types():
    result = parse_reverse_feature({
        'place_name': 42, 'text': 'Muizenberg', 'properties': ['x'], 'context': 'place.1',
    }, (18.47, -34.10))
    assert result['name'] == 'Muizenberg'
    assert result['fullAddress'] == ''
