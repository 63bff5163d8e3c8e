from le_dashboard.models import db, User
from le_dashboard.services.job_numbering import peek_job_number


def test_login_and_me(client):
    response = client.post('/api/auth/login', json={'username': 'admin', 'password': 'admin-pass'})
    assert response.status_code == 200
    body = response.get_json()
    assert body['message'] == 'Login successful'
    assert body['user']['username'] == 'admin'
    assert body['user']['lastLogin'] is not None
    assert 'password' not in body['user']

    me = client.get('/api/auth/me')
    assert me.status_code == 200
    assert me.get_json()['user']['role'] == 'Admin'


def test_login_failures(client):
    assert client.post('/api/auth/login', json={'username': 'admin'}).status_code == 400
    assert client.post('/api/auth/login', data='nope').status_code == 400

    wrong = client.post('/api/auth/login', json={'username': 'admin', 'password': 'guess'})
    assert wrong.status_code == 401
    assert wrong.get_json()['error'] == 'Invalid username or password'

    unknown = client.post('/api/auth/login', json={'username': 'ghost', 'password': 'boo'})
    assert unknown.status_code == 401


def test_logout_ends_session(auth_client):
    assert auth_client.post('/api/auth/logout').status_code == 200
    assert auth_client.get('/api/auth/me').status_code == 401


def test_change_password(app, user_client):
    response = user_client.post('/api/auth/change-password', json={
        'currentPassword': 'wrong', 'newPassword': 'longer-pass'
    })
    assert response.status_code == 401

    response = user_client.post('/api/auth/change-password', json={
        'currentPassword': 'clerk-pass', 'newPassword': 'short'
    })
    assert response.status_code == 400

    response = user_client.post('/api/auth/change-password', json={
        'currentPassword': 'clerk-pass', 'newPassword': 'longer-pass'
    })
    assert response.status_code == 200

    with app.app_context():
        user = db.session.execute(db.select(User).filter_by(username='clerk')).scalar_one()
        assert user.check_password('longer-pass')


def test_health_endpoints(client):
    response = client.get('/api/health')
    assert response.status_code == 200
    health = response.get_json()
    assert health['status'] == 'healthy'
    assert health['checks']['database']['type'] == 'SQLite'
    assert health['checks']['job_counter']['lastJobNumber'] == 0

    simple = client.get('/api/health/simple')
    assert simple.status_code == 200
    assert simple.get_json()['status'] == 'healthy'


def test_route_listing_is_public(client):
    response = client.get('/api/routes')
    assert response.status_code == 200
    methods = {}
    descriptions = {}
    for route in response.get_json()['routes']:
        methods.setdefault(route['path'], set()).update(route['methods'])
        descriptions[route['path']] = route['description']

    assert {'GET', 'POST'} <= methods['/api/jobs']
    assert methods['/api/job-items/bulk'] == {'POST'}
    assert descriptions['/api/admin/job-counter'].startswith('Current job counter value')


def test_json_error_handlers(client, auth_client):
    missing = client.get('/api/does-not-exist')
    assert missing.status_code == 404
    assert missing.get_json()['code'] == 'NOT_FOUND'

    wrong_method = auth_client.delete('/api/jobs')
    assert wrong_method.status_code == 405
    assert wrong_method.get_json()['code'] == 'METHOD_NOT_ALLOWED'


def test_app_starts_with_counter_row(app):
    with app.app_context():
        assert peek_job_number() == 0


def test_init_db_command_creates_admin(app, monkeypatch):
    app.config['DEFAULT_ADMIN_USERNAME'] = 'owner'
    app.config['DEFAULT_ADMIN_PASSWORD'] = 'owner-pass'

    result = app.test_cli_runner().invoke(args=['init-db'])
    assert result.exit_code == 0
    assert "Created admin user 'owner'" in result.output

    with app.app_context():
        owner = db.session.execute(db.select(User).filter_by(username='owner')).scalar_one()
        assert owner.is_admin
        assert owner.check_password('owner-pass')

    again = app.test_cli_runner().invoke(args=['init-db'])
    assert "already exists" in again.output
    assert "Database initialised" in again.output
