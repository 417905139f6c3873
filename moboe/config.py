"""
Configuration loader.
Reads settings from the environment (and an optional .env file) and makes them
available to the rest of the app.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Project root, used to resolve the default data paths
ROOT_DIR = Path(__file__).resolve().parents[1]

# Catalog and per-user storage locations
CATALOG_PATH = os.getenv("MOBOE_CATALOG_PATH", str(ROOT_DIR / "data" / "movies.json"))
STORAGE_DIR = os.getenv("MOBOE_STORAGE_DIR", str(ROOT_DIR / "data" / "users"))

# Discovery page size (movies per page)
PAGE_SIZE = int(os.getenv("MOBOE_PAGE_SIZE", "12"))

# Average movie length used for the collection "hours" statistic
AVERAGE_RUNTIME_HOURS = 2.5

# Demo auth settings
JWT_SECRET = os.getenv("JWT_SECRET", "moboe-demo-secret-key")
JWT_ALGORITHM = "HS256"
JWT_EXPIRES_DAYS = int(os.getenv("JWT_EXPIRES_DAYS", "30"))

# Chat settings: "static" answers from canned replies, "llm" calls an OpenAI-compatible API
CHAT_BACKEND = os.getenv("CHAT_BACKEND", "static")
CHAT_MAX_MESSAGE_LENGTH = 1000
CHAT_TIMEOUT_SECONDS = float(os.getenv("CHAT_TIMEOUT_SECONDS", "15"))
LLM_API_KEY = os.getenv("LLM_API_KEY")
LLM_BASE_URL = os.getenv("LLM_BASE_URL", "https://api.x.ai/v1")
LLM_MODEL = os.getenv("LLM_MODEL", "grok-3-mini-fast")

# Front-end origins allowed by CORS
CORS_ORIGINS = [
	origin.strip()
	for origin in os.getenv(
		"CORS_ORIGINS",
		",".join(f"http://localhost:{port}" for port in range(3000, 3006)),
	).split(",")
	if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
