"""
API /api/v1/admin/locales
"""
import logging

from catalog_admin.models import Locale
from catalog_admin.core.crypto import is_envelope


BASE = '/api/v1/admin/locales'

LOCALE_PAYLOAD = {
    'code': 'nl_BE',
    'displayName': 'Belgium (Dutch)',
    'regionalNames': ['  Vlaanderen  ', '', 'Brussel'],
    'bazaarVoiceApiKey': 'bv-api-key',
    'bvClientSecret': 'bv-client-secret',
    'bvClientId': 'client-42'
}


def _create(client, headers, **overrides):
    return client.post(BASE, json=dict(LOCALE_PAYLOAD, **overrides), headers=headers)


def test_plain_user_is_forbidden(client, user_headers):
    assert client.get(BASE, headers=user_headers).status_code == 403
    assert client.get(f'{BASE}/some-id/secrets', headers=user_headers).status_code == 403


def test_create_returns_safe_view(client, admin_headers, admin_user, session):
    response = _create(client, admin_headers)

    assert response.status_code == 201
    locale = response.get_json()['locale']
    assert locale['regionalNames'] == ['Vlaanderen', 'Brussel']
    assert locale['hasBazaarVoiceApiKey'] is True
    assert locale['hasBvResponseApiKey'] is False
    assert locale['createdBy'] == admin_user.id
    assert 'bazaarVoiceApiKey' not in locale
    assert 'bv-api-key' not in response.get_data(as_text=True)

    stored = session.get(Locale, locale['id'])
    assert is_envelope(stored.bazaar_voice_api_key)


def test_create_missing_display_name(client, admin_headers):
    response = client.post(BASE, json={'code': 'de_DE'}, headers=admin_headers)

    assert response.status_code == 400
    assert response.get_json()['error'] == 'Invalid body'


def test_duplicate_code_ignoring_case(client, admin_headers):
    _create(client, admin_headers)

    response = _create(client, admin_headers, code='NL_BE')

    assert response.status_code == 409
    assert response.get_json() == {'error': 'Locale code already exists'}


def test_list_and_paginate(client, admin_headers):
    for code in ['aa_AA', 'bb_BB', 'cc_CC']:
        _create(client, admin_headers, code=code)

    first = client.get(f'{BASE}?limit=2', headers=admin_headers).get_json()
    assert len(first['locales']) == 2
    assert first['nextCursor'] == first['locales'][-1]['id']

    second = client.get(f"{BASE}?limit=2&cursor={first['nextCursor']}", headers=admin_headers).get_json()
    assert len(second['locales']) == 1
    assert second['nextCursor'] is None

    codes = {locale['code'] for locale in first['locales'] + second['locales']}
    assert codes == {'aa_AA', 'bb_BB', 'cc_CC'}


def test_update_and_delete(client, admin_headers):
    locale = _create(client, admin_headers).get_json()['locale']

    response = client.patch(f"{BASE}/{locale['id']}", json={'displayName': 'België'}, headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()['locale']['displayName'] == 'België'
    assert response.get_json()['locale']['hasBvClientSecret'] is True

    response = client.delete(f"{BASE}/{locale['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json() == {'ok': True}

    assert client.get(f"{BASE}/{locale['id']}", headers=admin_headers).status_code == 404


def test_reveal_secrets_is_audited(client, admin_headers, caplog):
    locale = _create(client, admin_headers).get_json()['locale']

    with caplog.at_level(logging.INFO, logger='catalog_admin.audit'):
        response = client.get(
            f"{BASE}/{locale['id']}/secrets",
            headers=dict(admin_headers, **{'User-Agent': 'pytest-agent'})
        )

    assert response.status_code == 200
    body = response.get_json()
    assert body['secrets']['bazaarVoiceApiKey'] == 'bv-api-key'
    assert body['secrets']['bvClientSecret'] == 'bv-client-secret'
    assert body['secrets']['bvResponseApiKey'] is None
    assert body['auditId'].endswith(locale['id'])
    assert response.headers['Cache-Control'] == 'no-store'

    messages = [r.getMessage() for r in caplog.records if r.name == 'catalog_admin.audit']
    assert len(messages) == 1
    assert 'admin@example.com' in messages[0]
    assert 'pytest-agent' in messages[0]


def test_reveal_unknown_locale(client, admin_headers):
    assert client.get(f'{BASE}/missing/secrets', headers=admin_headers).status_code == 404
