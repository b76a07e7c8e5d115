from __future__ import annotations
import os

GITHUB_API_URL = os.environ.get("GITHUB_API_URL", "https://api.github.com")
GITHUB_TOKEN = os.environ.get("GH_TOKEN") or os.environ.get("GITHUB_TOKEN")
API_TIMEOUT = float(os.environ.get("SLIMIFY_API_TIMEOUT", "10"))
MAX_WORKERS = int(os.environ.get("SLIMIFY_MAX_WORKERS", "4"))
WORKFLOW_DIR = os.environ.get("SLIMIFY_WORKFLOW_DIR", ".github/workflows")
