"""
Central configuration for the wiki backend.

All settings loaded from .env file or environment variables.
See .env.example for available options.
"""
import json
import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file from backend directory
load_dotenv(Path(__file__).parent / ".env")

# Working tree of the pages repository (required at startup, see main.py)
PAGES_DIRECTORY = os.getenv("PAGES_DIRECTORY")

# Remote the pages repository is cloned from and pushed to
PAGES_GIT_REPOSITORY = os.getenv("PAGES_GIT_REPOSITORY")

# SSH key pair used for clone and push. Public key is optional.
PAGES_GIT_PRIVATE_KEY = os.getenv("PAGES_GIT_PRIVATE_KEY", str(Path.home() / ".ssh" / "id_ed25519"))
PAGES_GIT_PUBLIC_KEY = os.getenv("PAGES_GIT_PUBLIC_KEY")

# Format for pages created without an extension (a pandoc reader name)
DEFAULT_PAGE_FORMAT = os.getenv("DEFAULT_PAGE_FORMAT", "markdown")

# pandoc executable used to validate and render pages
PANDOC_PATH = os.getenv("PANDOC_PATH", "pandoc")

# KaTeX macros as a JSON object, e.g. {"\\RR": "\\mathbb{R}"}
KATEX_MACROS = json.loads(os.getenv("KATEX_MACROS", "{}"))

# User registry
USERS_DATABASE = os.getenv("USERS_DATABASE", str(Path(__file__).parent / "data" / "users.db"))

# First user, created as an approved administrator when the database is new
INITIAL_USER_NAME = os.getenv("INITIAL_USER_NAME")
INITIAL_USER_EMAIL = os.getenv("INITIAL_USER_EMAIL")
INITIAL_USER_URL = os.getenv("INITIAL_USER_URL", "")

# JWT settings for bearer authentication
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "info")
