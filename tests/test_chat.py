"""
Tests for the chat service: message validation, canned replies and the LLM backend's failure handling.
Run: pytest tests/test_chat.py
"""

import random
from types import SimpleNamespace

import httpx
import openai
import pytest

from moboe.chat import (
	CANNED_RESPONSES,
	ChatService,
	LLMResponder,
	StaticResponder,
	build_chat_service,
	validate_message,
)
from moboe.errors import ChatUnavailable, InvalidMessage


class FakeCompletions:
	"""Stands in for client.chat.completions; returns a canned reply or raises."""

	def __init__(self, reply=None, error=None):
		self.reply = reply
		self.error = error
		self.calls = []

	def create(self, **kwargs):
		self.calls.append(kwargs)
		if self.error is not None:
			raise self.error
		message = SimpleNamespace(content=self.reply)
		return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(completions):
	return SimpleNamespace(chat=SimpleNamespace(completions=completions))


@pytest.mark.parametrize('message', [None, '', '   ', 42, 'x' * 1001])
def test_invalid_messages(message):
	with pytest.raises(InvalidMessage):
		validate_message(message)


def test_limit_is_inclusive():
	assert validate_message('x' * 1000) == 'x' * 1000


def test_static_responder_picks_a_canned_reply():
	service = ChatService(StaticResponder(rng=random.Random(3)))
	reply = service.reply('What can you do?')
	assert reply.response in CANNED_RESPONSES
	assert reply.timestamp.tzinfo is not None


def test_llm_responder_sends_system_and_user_messages():
	completions = FakeCompletions(reply='Try Arrival.')
	responder = LLMResponder(api_key='k', model='test-model', timeout=2, client=fake_client(completions))

	assert ChatService(responder).reply('Something smart?').response == 'Try Arrival.'
	call = completions.calls[0]
	assert call['model'] == 'test-model'
	assert [m['role'] for m in call['messages']] == ['system', 'user']
	assert call['messages'][1]['content'] == 'Something smart?'


def test_llm_timeout_maps_to_504():
	request = httpx.Request('POST', 'https://llm.example/v1/chat/completions')
	completions = FakeCompletions(error=openai.APITimeoutError(request=request))
	responder = LLMResponder(api_key='k', timeout=0.5, client=fake_client(completions))

	with pytest.raises(ChatUnavailable) as excinfo:
		responder.respond('hello')
	assert excinfo.value.timed_out
	assert excinfo.value.status_code == 504


def test_llm_api_error_and_empty_reply_map_to_503():
	request = httpx.Request('POST', 'https://llm.example/v1/chat/completions')
	failing = LLMResponder(api_key='k', client=fake_client(FakeCompletions(error=openai.APIConnectionError(request=request))))
	with pytest.raises(ChatUnavailable) as excinfo:
		failing.respond('hello')
	assert excinfo.value.status_code == 503

	empty = LLMResponder(api_key='k', client=fake_client(FakeCompletions(reply='')))
	with pytest.raises(ChatUnavailable):
		empty.respond('hello')


def test_build_chat_service_falls_back_without_key():
	assert isinstance(build_chat_service('static').responder, StaticResponder)
	assert isinstance(build_chat_service('llm', api_key=None).responder, StaticResponder)
	assert isinstance(build_chat_service('llm', api_key='k', base_url='https://llm.example/v1').responder, LLMResponder)
