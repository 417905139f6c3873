"""
Chat service for the assistant widget.

Two backends:
    - StaticResponder: answers with one of a few canned MoBoe feature blurbs (no API key needed).
    - LLMResponder: forwards the message to an OpenAI-compatible chat completion API,
      giving up after a bounded wait.
"""

import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from openai import OpenAI, APIError, APITimeoutError
from loguru import logger

from .config import CHAT_MAX_MESSAGE_LENGTH
from .errors import InvalidMessage, ChatUnavailable
from .models import utc_now


CANNED_RESPONSES = (
	"🎬 Welcome to MoBoe! I can help you discover amazing movies, manage your watchlist, and find your next favorite film. What would you like to explore?",
	"🍿 MoBoe offers advanced movie search and filtering! You can search by title, filter by genre, year, and rating. Try our random movie generator for surprises!",
	"⭐ Create your personal movie collections with MoBoe! Add movies to your watchlist, mark them as watched, rate them, and write reviews to remember your thoughts.",
	"🎭 Discover movies across all genres! From action-packed blockbusters to heartwarming dramas, sci-fi adventures to romantic comedies - MoBoe has it all.",
	"📊 Track your movie journey with MoBoe! See your watching statistics, favorite genres, and get personalized recommendations based on your preferences.",
)

SYSTEM_PROMPT = (
	"You are the MoBoe movie assistant. Help users discover films, explain genres, "
	"and suggest what to watch next. Keep answers short and friendly."
)


@dataclass
class ChatReply:
	response: str
	timestamp: datetime = field(default_factory=utc_now)


def validate_message(message) -> str:
	"""Non-empty string (after trimming), at most CHAT_MAX_MESSAGE_LENGTH characters."""
	if not message or not isinstance(message, str):
		raise InvalidMessage("Message must be a non-empty string")
	if not message.strip():
		raise InvalidMessage("Message cannot be empty or only whitespace")
	if len(message) > CHAT_MAX_MESSAGE_LENGTH:
		raise InvalidMessage(f"Message length cannot exceed {CHAT_MAX_MESSAGE_LENGTH} characters")
	return message


class StaticResponder:
	"""Random canned reply; the message itself is ignored."""

	def __init__(self, responses: Sequence[str] = CANNED_RESPONSES, rng: Optional[random.Random] = None):
		self.responses = tuple(responses)
		self._rng = rng or random.Random()

	def respond(self, message: str) -> str:
		return self._rng.choice(self.responses)


class LLMResponder:
	"""Chat completion against an OpenAI-compatible endpoint with a request timeout."""

	def __init__(
		self,
		api_key: Optional[str],
		base_url: Optional[str] = None,
		model: str = 'grok-3-mini-fast',
		timeout: float = 15.0,
		temperature: float = 0.7,
		client: Optional[OpenAI] = None,
	):
		self.model = model
		self.temperature = temperature
		self.timeout = timeout
		# max_retries=0 so the timeout bounds the whole call
		self.client = client or OpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)

	def respond(self, message: str) -> str:
		try:
			response = self.client.chat.completions.create(
				model=self.model,
				messages=[
					{"role": "system", "content": SYSTEM_PROMPT},
					{"role": "user", "content": message},
				],
				temperature=self.temperature,
				timeout=self.timeout,
			)
		except APITimeoutError as e:
			raise ChatUnavailable(f"Chat backend did not answer within {self.timeout:g}s", timed_out=True) from e
		except APIError as e:
			raise ChatUnavailable(f"Chat backend error: {e}") from e

		text = response.choices[0].message.content if response.choices else None
		if not text:
			raise ChatUnavailable("Chat backend returned an empty response")
		return text


class ChatService:
	"""Validates the message, logs a preview, and asks the configured responder."""

	def __init__(self, responder):
		self.responder = responder

	def reply(self, message) -> ChatReply:
		message = validate_message(message)
		preview = message[:100] + ('...' if len(message) > 100 else '')
		logger.info(f"[Chat] Message received: {preview}")
		reply = ChatReply(response=self.responder.respond(message))
		logger.info(f"[Chat] Response sent via {type(self.responder).__name__}")
		return reply


def build_chat_service(backend: str, api_key: Optional[str] = None, base_url: Optional[str] = None,
		model: str = 'grok-3-mini-fast', timeout: float = 15.0) -> ChatService:
	"""Pick a responder from config; 'llm' without an API key falls back to canned replies."""
	if backend == 'llm':
		if api_key:
			logger.info(f"[Chat] Using LLM backend ({model} @ {base_url})")
			return ChatService(LLMResponder(api_key=api_key, base_url=base_url, model=model, timeout=timeout))
		logger.warning("[Chat] CHAT_BACKEND=llm but no LLM_API_KEY set; using canned responses")
	return ChatService(StaticResponder())
