"""
Authentication tests
Signup, login by username or email, role façades and legacy password upgrade
"""
from datetime import date

from tourbook.extensions import db
from tourbook.models import Customer, User
from tourbook.services.accounts import Admin, Customer as CustomerFacade, Guest
from tourbook.services.auth_service import (
    INVALID_PASSWORD, NOT_FOUND, AuthService, is_strong_hash,
)

from .conftest import PASSWORD


def signup_body(**overrides):
    body = {
        'username': 'newbie',
        'email': 'newbie@example.com',
        'password': 'Str0ng!Pass',
        'first_name': 'New',
        'last_name': 'Bie',
    }
    body.update(overrides)
    return body


class TestSignup:

    def test_signup_creates_customer(self, client):
        response = client.post('/api/auth/signup', json=signup_body())

        assert response.status_code == 201
        data = response.get_json()
        assert data['username'] == 'newbie'
        assert data['role'] == 'customer'
        user = User.query.filter_by(username='newbie').one()
        assert is_strong_hash(user.password_hash)
        assert db.session.get(Customer, user.user_id) is not None

    def test_duplicate_email_inserts_nothing(self, client, customer):
        before = User.query.count()
        response = client.post('/api/auth/signup', json=signup_body(email=customer.email))

        assert response.status_code == 409
        assert response.get_json()['code'] == 'DUPLICATE'
        assert User.query.count() == before
        assert Customer.query.count() == 1

    def test_duplicate_username_rejected(self, client, customer):
        response = client.post('/api/auth/signup', json=signup_body(username=customer.username))
        assert response.status_code == 409

    def test_weak_password_rejected(self, client):
        response = client.post('/api/auth/signup', json=signup_body(password='password1'))
        assert response.status_code == 400
        assert 'password' in response.get_json()['error'].lower()

    def test_invalid_email_rejected(self, client):
        response = client.post('/api/auth/signup', json=signup_body(email='not-an-email'))
        assert response.status_code == 400

    def test_missing_fields_rejected(self, client):
        response = client.post('/api/auth/signup', json={'username': 'x'})
        assert response.status_code == 400
        assert User.query.count() == 0

    def test_under_eighteen_rejected(self, client):
        today = date.today()
        dob = date(today.year - 10, 1, 1).isoformat()
        response = client.post('/api/auth/signup', json=signup_body(DOB=dob))
        assert response.status_code == 400
        assert User.query.count() == 0

    def test_guest_signup_service_returns_identity(self, app):
        created = Guest.guest_signup(signup_body(username='svc', email='svc@example.com'))
        assert set(created) == {'user_id', 'username', 'email', 'role'}
        assert created['role'] == 'customer'

    def test_duplicate_caught_by_database_is_a_conflict(self, client, customer, monkeypatch):
        # Another request inserted the same username between the check and the insert
        monkeypatch.setattr(AuthService, 'ensure_unique_username_email',
                            staticmethod(lambda username, email: None))
        before = User.query.count()

        response = client.post('/api/auth/signup', json=signup_body(username=customer.username))

        assert response.status_code == 409
        assert response.get_json()['code'] == 'DUPLICATE'
        assert User.query.count() == before

    def test_non_string_username_rejected(self, client):
        response = client.post('/api/auth/signup', json=signup_body(username=12345))
        assert response.status_code == 400
        assert User.query.count() == 0


class TestLogin:

    def test_login_with_email_sets_cookie(self, client, customer):
        response = client.post('/api/auth/login', json={'identifier': customer.email, 'password': PASSWORD})

        assert response.status_code == 200
        assert response.get_json()['user']['user_id'] == customer.user_id
        cookies = response.headers.getlist('Set-Cookie')
        assert any(c.startswith('auth_token=') and 'HttpOnly' in c for c in cookies)

    def test_login_with_username(self, client, customer):
        response = client.post('/api/auth/login', json={'identifier': '  alice  ', 'password': PASSWORD})
        assert response.status_code == 200
        assert response.get_json()['user']['role'] == 'customer'

    def test_wrong_password(self, client, customer):
        response = client.post('/api/auth/login', json={'identifier': 'alice', 'password': 'Wrong!123'})
        assert response.status_code == 401

    def test_unknown_user(self, client):
        response = client.post('/api/auth/login', json={'identifier': 'ghost', 'password': PASSWORD})
        assert response.status_code == 401

    def test_role_facade_refuses_other_roles(self, client, customer):
        response = client.post('/api/auth/login',
                               json={'identifier': 'alice', 'password': PASSWORD, 'role': 'admin'})
        assert response.status_code == 401
        assert Admin.login('alice', PASSWORD) is None
        assert CustomerFacade.login('alice', PASSWORD).user_id == customer.user_id

    def test_me_requires_auth(self, client):
        assert client.get('/api/auth/me').status_code == 401

    def test_me_returns_user(self, client, customer, headers_for):
        response = client.get('/api/auth/me', headers=headers_for(customer))
        assert response.status_code == 200
        assert response.get_json()['user']['username'] == 'alice'

    def test_garbage_token_rejected(self, client):
        response = client.get('/api/auth/me', headers={'Authorization': 'Bearer nope'})
        assert response.status_code == 401


class TestLoginDetailed:

    def test_reasons(self, app, customer):
        assert AuthService.login_detailed('ghost', PASSWORD).reason == NOT_FOUND
        assert AuthService.login_detailed('alice', 'Wrong!123').reason == INVALID_PASSWORD
        outcome = AuthService.login_detailed('alice', PASSWORD)
        assert outcome.ok
        assert outcome.rehashed is False

    def test_plaintext_password_is_rehashed_on_login(self, app):
        legacy = User(username='legacy', email='legacy@example.com', password_hash='Legacy1!', role='customer')
        db.session.add(legacy)
        db.session.commit()

        outcome = AuthService.login_detailed('legacy', 'Legacy1!')

        assert outcome.ok
        assert outcome.rehashed
        stored = db.session.get(User, legacy.user_id).password_hash
        assert is_strong_hash(stored)
        assert stored != 'Legacy1!'
        # Same password still works against the new hash
        again = AuthService.login_detailed('legacy@example.com', 'Legacy1!')
        assert again.ok and not again.rehashed

    def test_plaintext_mismatch_is_not_rehashed(self, app):
        legacy = User(username='legacy', email='legacy@example.com', password_hash='Legacy1!', role='customer')
        db.session.add(legacy)
        db.session.commit()

        outcome = AuthService.login_detailed('legacy', 'other')

        assert outcome.reason == INVALID_PASSWORD
        assert db.session.get(User, legacy.user_id).password_hash == 'Legacy1!'

    def test_email_match_wins_over_username_match(self, make_user):
        owner = make_user('customer', username='owner', email='shared@example.com')
        make_user('customer', username='shared@example.com', email='impostor@example.com')

        assert AuthService.find_by_identifier('shared@example.com').user_id == owner.user_id


class TestChangePassword:

    def change(self, client, headers, current=PASSWORD, new='N3w&Passw0rd', confirm=None):
        return client.post('/api/auth/change-password', headers=headers, json={
            'currentPassword': current,
            'newPassword': new,
            'confirmPassword': new if confirm is None else confirm,
        })

    def test_change_password(self, client, customer, headers_for):
        response = self.change(client, headers_for(customer))

        assert response.status_code == 200
        assert AuthService.login_detailed('alice', 'N3w&Passw0rd').ok
        assert AuthService.login_detailed('alice', PASSWORD).reason == INVALID_PASSWORD

    def test_wrong_current_password(self, client, customer, headers_for):
        stored = customer.password_hash

        response = self.change(client, headers_for(customer), current='Wrong!123')

        assert response.status_code == 400
        assert response.get_json()['code'] == 'INVALID_PASSWORD'
        assert db.session.get(User, customer.user_id).password_hash == stored

    def test_confirmation_must_match(self, client, customer, headers_for):
        response = self.change(client, headers_for(customer), confirm='N3w&Passw0rd?')
        assert response.status_code == 400

    def test_new_password_must_differ(self, client, customer, headers_for):
        response = self.change(client, headers_for(customer), new=PASSWORD)
        assert response.status_code == 400
        assert 'different' in response.get_json()['error']

    def test_weak_new_password(self, client, customer, headers_for):
        response = self.change(client, headers_for(customer), new='password1')
        assert response.status_code == 400

    def test_requires_login(self, client):
        response = client.post('/api/auth/change-password', json={'currentPassword': PASSWORD})
        assert response.status_code == 401
