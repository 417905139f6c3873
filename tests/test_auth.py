"""
Tests for demo auth: the session store and JWT token service.
Run: pytest tests/test_auth.py
"""

import jwt
import pytest

from moboe.auth import SessionStore, TokenService
from moboe.errors import AuthError


def test_register_and_duplicate_email():
	sessions = SessionStore()
	user = sessions.register('ada', 'ada@example.com', 'pw')
	assert user.public() == {'id': user.id, 'username': 'ada', 'email': 'ada@example.com'}

	with pytest.raises(AuthError):
		sessions.register('ada2', 'ada@example.com', 'pw')


@pytest.mark.parametrize('username,email,password', [('', 'a@b.c', 'pw'), ('a', '', 'pw'), ('a', 'a@b.c', '')])
def test_register_requires_all_fields(username, email, password):
	with pytest.raises(AuthError) as excinfo:
		SessionStore().register(username, email, password)
	assert excinfo.value.status_code == 400


def test_login_accepts_any_credentials():
	sessions = SessionStore()
	user = sessions.login('grace@example.com', 'whatever')
	assert user.username == 'grace'
	# same email -> same user, regardless of password
	assert sessions.login('grace@example.com', 'different').id == user.id
	assert sessions.get_user(user.id) is user

	with pytest.raises(AuthError):
		sessions.login('grace@example.com', '')


def test_user_ids_are_unique_and_store_clears():
	sessions = SessionStore()
	ids = {sessions.login(f'u{i}@example.com', 'pw').id for i in range(5)}
	assert len(ids) == 5
	sessions.clear()
	assert len(sessions) == 0


def test_token_round_trip():
	tokens = TokenService('secret', expires_days=30)
	token = tokens.issue('12345')
	assert tokens.verify(token) == '12345'


def test_bad_tokens_are_401():
	tokens = TokenService('secret')
	forged = TokenService('other-secret').issue('1')
	expired = TokenService('secret', expires_days=-1).issue('1')
	no_id = jwt.encode({'sub': '1'}, 'secret', algorithm='HS256')

	for token in ('garbage', forged, expired, no_id):
		with pytest.raises(AuthError) as excinfo:
			tokens.verify(token)
		assert excinfo.value.status_code == 401
