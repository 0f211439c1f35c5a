"""Tests for the Flask JSON interface."""

import sys
import os
import json

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from app import create_app


@pytest.fixture
def app(tmp_path):
    config = {
        'storage': {'backend': 'memory'},
        'admin': {'default_password': 'admin123'},
        'session': {'timeout_minutes': 30},
        'export': {'output_dir': str(tmp_path / 'exports')},
        'logging': {'level': 'WARNING'},
    }
    path = tmp_path / 'config.yaml'
    path.write_text(json.dumps(config))
    return create_app(config_path=str(path))


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, username='admin', password='admin123'):
    return client.post('/login', json={'username': username, 'password': password})


class TestSessionRoutes:
    def test_login_and_session(self, client):
        resp = _login(client)
        assert resp.status_code == 200
        assert resp.get_json()['user']['role'] == 'admin'
        assert 'password' not in resp.get_json()['user']
        assert client.get('/session').get_json()['logged_in'] is True

    def test_bad_login(self, client):
        resp = _login(client, password='wrong')
        assert resp.status_code == 401
        assert resp.get_json()['reason'] == 'invalid_credentials'

    def test_logout(self, client):
        _login(client)
        client.post('/logout')
        assert client.get('/session').get_json()['logged_in'] is False

    def test_non_object_json_body(self, client):
        assert client.post('/login', json=['admin', 'admin123']).status_code == 401
        assert client.post('/login', json='admin').status_code == 401
        _login(client)
        assert client.post('/users', json=['bob', 'pw']).status_code == 400
        assert client.post('/activities', json='did X').status_code == 400

    def test_form_login(self, client):
        resp = client.post('/login', data={'username': 'admin', 'password': 'admin123'})
        assert resp.status_code == 200


class TestUserRoutes:
    def test_requires_login(self, client):
        assert client.get('/users').status_code == 401

    def test_create_and_list(self, client):
        _login(client)
        assert client.post('/users', json={'username': 'bob', 'password': 'pw'}).status_code == 201
        body = client.get('/users').get_json()
        assert body['count'] == 1
        assert body['users'][0]['username'] == 'bob'

    def test_create_errors(self, client):
        _login(client)
        client.post('/users', json={'username': 'bob', 'password': 'pw'})
        dup = client.post('/users', json={'username': 'bob', 'password': 'x'})
        assert dup.status_code == 409
        assert dup.get_json()['reason'] == 'duplicate_username'
        missing = client.post('/users', json={'username': '', 'password': 'x'})
        assert missing.status_code == 400

    def test_non_admin_forbidden(self, client):
        _login(client)
        client.post('/users', json={'username': 'bob', 'password': 'pw'})
        _login(client, 'bob', 'pw')
        assert client.get('/users').status_code == 403
        assert client.get('/storage').status_code == 403

    def test_delete(self, client):
        _login(client)
        client.post('/users', json={'username': 'bob', 'password': 'pw'})
        assert client.delete('/users/admin').status_code == 403
        assert client.delete('/users/ghost').status_code == 404
        assert client.delete('/users/bob').status_code == 200
        assert client.get('/users').get_json()['count'] == 0


class TestActivityRoutes:
    def test_own_activities(self, client):
        _login(client)
        client.post('/users', json={'username': 'bob', 'password': 'pw'})
        _login(client, 'bob', 'pw')
        assert client.post('/activities', json={'description': 'did X'}).status_code == 201
        body = client.get('/users/bob/activities').get_json()
        assert [a['description'] for a in body['activities']] == ['User logged in', 'did X']

    def test_other_users_activities_forbidden(self, client):
        _login(client)
        client.post('/users', json={'username': 'bob', 'password': 'pw'})
        client.post('/users', json={'username': 'amy', 'password': 'pw'})
        _login(client, 'bob', 'pw')
        assert client.get('/users/amy/activities').status_code == 403

    def test_empty_description_rejected(self, client):
        _login(client)
        assert client.post('/activities', json={'description': '  '}).status_code == 400

    def test_export_csv(self, client):
        _login(client)
        resp = client.get('/users/admin/activities/export?format=csv')
        assert resp.status_code == 200
        assert resp.mimetype == 'text/csv'
        assert b'User logged in' in resp.data

    def test_export_bad_format(self, client):
        _login(client)
        assert client.get('/users/admin/activities/export?format=xml').status_code == 400


class TestStorageRoutes:
    def test_storage_usage(self, client, app):
        _login(client)
        body = client.get('/storage').get_json()
        store = app.extensions['user_store']
        expected = sum(
            len((store.storage.get_item(k) or '').encode('utf-8'))
            for k in ('users', 'userActivities')
        )
        assert body['total_bytes'] == expected
        assert body['user_count'] == 1

    def test_reset(self, client, app):
        _login(client)
        client.post('/users', json={'username': 'bob', 'password': 'pw'})
        assert client.post('/reset').status_code == 200
        store = app.extensions['user_store']
        assert store.list_users() == []
        assert client.get('/session').get_json()['logged_in'] is False
