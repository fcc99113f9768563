"""
API /api/v1/categories et /api/v1/admin/categories
"""
import pytest


BASE = '/api/v1/admin/categories'


def _create(client, headers, **payload):
    return client.post(BASE, json=payload, headers=headers)


class TestAccess:

    def test_public_tree_needs_no_token(self, client):
        response = client.get('/api/v1/categories')

        assert response.status_code == 200
        assert response.get_json() == []

    def test_admin_routes_need_token(self, client):
        assert client.get(BASE).status_code == 401

    @pytest.mark.parametrize('method, path', [
        ('get', BASE),
        ('post', BASE),
        ('put', f'{BASE}/some-id'),
        ('delete', f'{BASE}/some-id'),
    ])
    def test_plain_user_is_forbidden(self, client, user_headers, method, path):
        response = getattr(client, method)(path, json={}, headers=user_headers)

        assert response.status_code == 403
        assert response.get_json()['error'] == 'Forbidden'


class TestCrud:

    def test_create_and_list(self, client, admin_headers):
        response = _create(client, admin_headers, name='Televisions', label='Televisions', categoryType='tv')
        assert response.status_code == 201
        root = response.get_json()['category']

        response = _create(client, admin_headers, name='QLED TVs', label='QLED TVs', parentId=root['id'])
        assert response.status_code == 201

        categories = client.get(BASE, headers=admin_headers).get_json()['categories']
        assert [c['name'] for c in categories] == ['Televisions']
        assert [c['name'] for c in categories[0]['subcategories']] == ['QLED TVs']

        public = client.get('/api/v1/categories').get_json()
        assert public[0]['subcategories'][0]['label'] == 'QLED TVs'

    def test_invalid_body(self, client, admin_headers):
        response = _create(client, admin_headers, name='No label')

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Invalid body'

    def test_blank_name_is_invalid(self, client, admin_headers):
        response = _create(client, admin_headers, name='  ', label='Label')

        assert response.status_code == 400

    def test_duplicate_name(self, client, admin_headers):
        _create(client, admin_headers, name='Televisions', label='Televisions')

        response = _create(client, admin_headers, name='Televisions', label='Other')

        assert response.status_code == 409
        assert response.get_json() == {'error': 'Category name must be unique'}

    def test_update_and_get(self, client, admin_headers):
        category = _create(client, admin_headers, name='Audio', label='Audio').get_json()['category']

        response = client.put(f"{BASE}/{category['id']}", json={'description': 'Speakers'}, headers=admin_headers)
        assert response.status_code == 200
        assert response.get_json()['category']['description'] == 'Speakers'

        fetched = client.get(f"{BASE}/{category['id']}", headers=admin_headers).get_json()['category']
        assert fetched['name'] == 'Audio'
        assert fetched['description'] == 'Speakers'

    def test_update_self_parent(self, client, admin_headers):
        category = _create(client, admin_headers, name='Audio', label='Audio').get_json()['category']

        response = client.patch(f"{BASE}/{category['id']}", json={'parentId': category['id']}, headers=admin_headers)

        assert response.status_code == 400

    def test_update_no_changes(self, client, admin_headers):
        category = _create(client, admin_headers, name='Audio', label='Audio').get_json()['category']

        response = client.put(f"{BASE}/{category['id']}", json={'unknown': 1}, headers=admin_headers)

        assert response.status_code == 400
        assert response.get_json()['error'] == 'No changes supplied'

    def test_unknown_category(self, client, admin_headers):
        assert client.get(f'{BASE}/missing', headers=admin_headers).status_code == 404
        assert client.delete(f'{BASE}/missing', headers=admin_headers).status_code == 404

    def test_adding_child_keeps_parent_timestamp(self, client, admin_headers):
        audio = _create(client, admin_headers, name='Audio', label='Audio').get_json()['category']

        _create(client, admin_headers, name='Soundbars', label='Soundbars', parentId=audio['id'])

        fetched = client.get(f"{BASE}/{audio['id']}", headers=admin_headers).get_json()['category']
        assert fetched['updatedAt'] == audio['updatedAt']
        assert [c['name'] for c in fetched['subcategories']] == ['Soundbars']

    def test_delete_guard(self, client, admin_headers):
        root = _create(client, admin_headers, name='Audio', label='Audio').get_json()['category']
        child = _create(client, admin_headers, name='Soundbars', label='Soundbars',
                        parentId=root['id']).get_json()['category']

        response = client.delete(f"{BASE}/{root['id']}", headers=admin_headers)
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Remove subcategories first'

        response = client.delete(f"{BASE}/{child['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert response.get_json() == {'id': child['id']}

        assert client.delete(f"{BASE}/{root['id']}", headers=admin_headers).status_code == 200
        assert client.get(BASE, headers=admin_headers).get_json()['categories'] == []


def test_security_headers(client):
    response = client.get('/health')

    assert response.headers['X-Content-Type-Options'] == 'nosniff'
    assert response.headers['Cache-Control'] == 'no-store'
