def test_users_are_admin_only(user_client, client):
    assert client.get('/api/users').status_code == 401

    response = user_client.get('/api/users')
    assert response.status_code == 403
    assert response.get_json() == {'error': 'Admin access required'}


def test_list_users_never_exposes_passwords(auth_client):
    users = auth_client.get('/api/users').get_json()
    assert {u['username'] for u in users} == {'admin', 'clerk'}
    for user in users:
        assert 'password' not in user
        assert 'passwordHash' not in user


def test_create_update_delete_user(auth_client, app):
    response = auth_client.post('/api/users', json={
        'username': 'sales1',
        'password': 'quote-me',
        'firstName': 'Sam',
        'lastName': 'Seller',
    })
    assert response.status_code == 201
    user = response.get_json()
    assert user['role'] == 'User'
    assert user['fullName'] == 'Sam Seller'

    duplicate = auth_client.post('/api/users', json={'username': 'sales1', 'password': 'x'})
    assert duplicate.status_code == 400

    updated = auth_client.put(f"/api/users/{user['id']}", json={'role': 'Admin', 'isActive': False})
    assert updated.status_code == 200
    assert updated.get_json()['role'] == 'Admin'
    assert updated.get_json()['isActive'] is False

    login = app.test_client().post('/api/auth/login', json={'username': 'sales1', 'password': 'quote-me'})
    assert login.status_code == 401
    assert login.get_json()['error'] == 'Account is disabled'

    assert auth_client.delete(f"/api/users/{user['id']}").status_code == 204
    assert auth_client.get(f"/api/users/{user['id']}").status_code == 404


def test_admin_cannot_delete_own_account(auth_client):
    me = auth_client.get('/api/auth/me').get_json()['user']
    response = auth_client.delete(f"/api/users/{me['id']}")
    assert response.status_code == 400
