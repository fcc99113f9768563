"""
LocaleService - locales et identifiants Bazaarvoice chiffrés
"""
import json
import logging

import pytest

from catalog_admin.models import Locale
from catalog_admin.services.locale_service import LocaleService, sanitize_regional_names
from catalog_admin.core.crypto import is_envelope
from catalog_admin.core.errors import InvalidInput, NotFound, Conflict


SECRET_VIEW_KEYS = {'bazaarVoiceApiKey', 'bvResponseApiKey', 'bvClientSecret'}


@pytest.fixture
def service(session):
    return LocaleService(session)


@pytest.fixture
def nl_be(service, session):
    locale = service.create({
        'code': 'nl_BE',
        'display_name': 'Belgium (Dutch)',
        'regional_names': ['Vlaanderen', 'Brussel'],
        'bazaar_voice_api_key': 'bv-api-key',
        'bv_response_api_key': 'bv-response-key',
        'bv_client_secret': 'bv-client-secret',
        'bv_client_id': 'client-42'
    })
    session.commit()
    return locale


class TestCreate:

    def test_secrets_are_encrypted_at_rest(self, session, nl_be):
        locale = session.get(Locale, nl_be['id'])

        for field, plain in [
            ('bazaar_voice_api_key', 'bv-api-key'),
            ('bv_response_api_key', 'bv-response-key'),
            ('bv_client_secret', 'bv-client-secret'),
        ]:
            stored = getattr(locale, field)
            assert stored != plain
            assert is_envelope(stored)

        assert locale.bv_client_id == 'client-42'

    def test_safe_view_has_no_secrets(self, nl_be):
        assert not SECRET_VIEW_KEYS & set(nl_be)
        assert nl_be['hasBazaarVoiceApiKey'] is True
        assert nl_be['hasBvResponseApiKey'] is True
        assert nl_be['hasBvClientSecret'] is True
        assert nl_be['bvClientId'] == 'client-42'
        assert nl_be['regionalNames'] == ['Vlaanderen', 'Brussel']

    def test_missing_secrets_stay_null(self, service, session):
        created = service.create({'code': 'fr_BE', 'display_name': 'Belgique'})

        locale = session.get(Locale, created['id'])
        assert locale.bazaar_voice_api_key is None
        assert created['hasBazaarVoiceApiKey'] is False

    def test_code_unique_ignoring_case(self, service, nl_be):
        with pytest.raises(Conflict) as exc_info:
            service.create({'code': 'NL_be', 'display_name': 'Duplicate'})

        assert exc_info.value.message == 'Locale code already exists'

    @pytest.mark.parametrize('data', [
        {'display_name': 'No code'},
        {'code': '  ', 'display_name': 'Blank code'},
        {'code': 'de_DE'},
        {'code': 'de_DE', 'display_name': ''},
    ])
    def test_code_and_display_name_required(self, service, data):
        with pytest.raises(InvalidInput):
            service.create(data)

    def test_created_by_recorded(self, service, admin_user):
        created = service.create({'code': 'nl_NL', 'display_name': 'Nederland'}, created_by=admin_user.id)

        assert created['createdBy'] == admin_user.id


class TestUpdate:

    def test_omitted_secret_is_untouched(self, service, session, nl_be):
        before = session.get(Locale, nl_be['id']).bv_client_secret

        service.update(nl_be['id'], {'display_name': 'België'})

        assert session.get(Locale, nl_be['id']).bv_client_secret == before

    def test_supplied_secret_is_reencrypted(self, service, session, nl_be):
        service.update(nl_be['id'], {'bv_client_secret': 'rotated'})

        stored = session.get(Locale, nl_be['id']).bv_client_secret
        assert is_envelope(stored)
        assert service.reveal_secrets(nl_be['id'])['secrets']['bvClientSecret'] == 'rotated'

    def test_null_clears_secret(self, service, nl_be):
        updated = service.update(nl_be['id'], {'bazaar_voice_api_key': None})

        assert updated['hasBazaarVoiceApiKey'] is False
        assert service.reveal_secrets(nl_be['id'])['secrets']['bazaarVoiceApiKey'] is None

    def test_change_case_of_own_code(self, service, nl_be):
        assert service.update(nl_be['id'], {'code': 'NL_BE'})['code'] == 'NL_BE'

    def test_code_taken_by_other_locale(self, service, nl_be):
        other = service.create({'code': 'fr_BE', 'display_name': 'Belgique'})

        with pytest.raises(Conflict):
            service.update(other['id'], {'code': 'nl_be'})

    def test_no_changes_supplied(self, service, nl_be):
        with pytest.raises(InvalidInput):
            service.update(nl_be['id'], {})

    def test_unknown_locale(self, service):
        with pytest.raises(NotFound):
            service.update('missing-id', {'description': 'x'})


class TestRevealSecrets:

    def test_reveal_decrypts(self, service, nl_be):
        result = service.reveal_secrets(nl_be['id'], actor='admin@example.com')

        assert result['secrets']['bazaarVoiceApiKey'] == 'bv-api-key'
        assert result['secrets']['bvResponseApiKey'] == 'bv-response-key'
        assert result['secrets']['bvClientSecret'] == 'bv-client-secret'
        assert result['secrets']['code'] == 'nl_BE'
        assert result['auditId'].endswith(f"-{nl_be['id']}")

    def test_tampered_secret_reads_as_null(self, service, session, nl_be):
        locale = session.get(Locale, nl_be['id'])
        nonce, tag, ciphertext = locale.bv_client_secret.split(':')
        locale.bv_client_secret = f"{nonce}:{'0' * 32 if tag != '0' * 32 else '1' * 32}:{ciphertext}"
        session.commit()

        secrets = service.reveal_secrets(nl_be['id'])['secrets']

        assert secrets['bvClientSecret'] is None
        assert secrets['bazaarVoiceApiKey'] == 'bv-api-key'

    def test_reveal_writes_audit_record(self, service, nl_be, caplog):
        with caplog.at_level(logging.INFO, logger='catalog_admin.audit'):
            service.reveal_secrets(nl_be['id'], actor='admin@example.com',
                                   user_agent='pytest', remote_addr='10.0.0.1')

        records = [r for r in caplog.records if r.name == 'catalog_admin.audit']
        assert len(records) == 1
        entry = json.loads(records[0].getMessage().split('Secret access: ', 1)[1])
        assert entry['action'] == 'DECRYPT_LOCALE_SECRETS'
        assert entry['adminUser'] == 'admin@example.com'
        assert entry['localeCode'] == 'nl_BE'
        assert entry['ip'] == '10.0.0.1'
        assert 'bv-api-key' not in records[0].getMessage()

    def test_no_audit_record_when_disabled(self, session, nl_be, caplog):
        service = LocaleService(session, audit_enabled=False)

        with caplog.at_level(logging.INFO, logger='catalog_admin.audit'):
            service.reveal_secrets(nl_be['id'])

        assert not [r for r in caplog.records if r.name == 'catalog_admin.audit']

    def test_failing_audit_log_does_not_block_reveal(self, service, nl_be, caplog):
        class BrokenHandler(logging.Handler):
            def emit(self, record):
                raise RuntimeError('audit sink unavailable')

        audit_logger = logging.getLogger('catalog_admin.audit')
        handler = BrokenHandler()
        audit_logger.addHandler(handler)
        try:
            with caplog.at_level(logging.INFO, logger='catalog_admin.audit'):
                result = service.reveal_secrets(nl_be['id'], actor='admin@example.com')
        finally:
            audit_logger.removeHandler(handler)

        assert result['secrets']['bazaarVoiceApiKey'] == 'bv-api-key'
        assert result['secrets']['bvClientSecret'] == 'bv-client-secret'
        assert any('Audit log write failed' in r.getMessage() for r in caplog.records)

    def test_reveal_unknown_locale(self, service):
        with pytest.raises(NotFound):
            service.reveal_secrets('missing-id')


class TestList:

    def test_cursor_pagination(self, service):
        for code in ['aa_AA', 'bb_BB', 'cc_CC', 'dd_DD', 'ee_EE']:
            service.create({'code': code, 'display_name': code})

        seen = []
        cursor = None
        while True:
            page, cursor = service.list_locales(cursor=cursor, limit=2)
            seen.extend(locale['code'] for locale in page)
            if cursor is None:
                break

        assert sorted(seen) == ['aa_AA', 'bb_BB', 'cc_CC', 'dd_DD', 'ee_EE']
        assert len(seen) == len(set(seen))

    def test_search_by_accented_regional_name(self, service, nl_be):
        service.create({'code': 'fr_BE', 'display_name': 'Belgique', 'regional_names': ['Liège', 'Wallonie']})

        page, _ = service.list_locales(q='liège')

        assert [locale['code'] for locale in page] == ['fr_BE']
        assert page[0]['regionalNames'] == ['Liège', 'Wallonie']

    def test_search_by_regional_name(self, service, nl_be):
        service.create({'code': 'fr_FR', 'display_name': 'France'})

        page, _ = service.list_locales(q='vlaanderen')

        assert [locale['code'] for locale in page] == ['nl_BE']

    def test_list_never_contains_secrets(self, service, nl_be):
        page, _ = service.list_locales()

        assert not SECRET_VIEW_KEYS & set(page[0])


def test_delete(service, session, nl_be):
    service.delete(nl_be['id'])

    assert session.get(Locale, nl_be['id']) is None
    with pytest.raises(NotFound):
        service.delete(nl_be['id'])


def test_sanitize_regional_names():
    names = sanitize_regional_names(['  a ', '', None, 'x' * 250, 'b', 'c', 'd', 'e'])

    assert names == ['a', 'x' * 200, 'b', 'c', 'd']
    assert sanitize_regional_names('not-a-list') == []
