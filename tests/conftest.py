# tests/conftest.py
"""
Global test bootstrap
- Points settings at a throwaway SQLite database and staging directory
- Configures a test bucket so the S3 wrapper can be built without AWS
- Pulls in the shared fixtures (db, app, auth, storage, media)
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

# ──────────────────────────────────────────────────────────────────────────────
# 🌱 Test env (set BEFORE importing tubely so `settings` picks it up)
# ──────────────────────────────────────────────────────────────────────────────
_TMP = Path(tempfile.mkdtemp(prefix="tubely-tests-"))

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TMP / 'tubely-test.db'}")
os.environ.setdefault("ASSETS_ROOT", str(_TMP / "assets"))
os.environ.setdefault("AWS_BUCKET_NAME", "test-bucket")
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("PLATFORM", "dev")
os.environ.setdefault("LOG_TO_FILE", "0")
os.environ.setdefault("LOG_LEVEL", "WARNING")

# ──────────────────────────────────────────────────────────────────────────────
# 📦 Fixtures
# ──────────────────────────────────────────────────────────────────────────────
from tests.fixtures.db import *        # noqa: F401,F403,E402
from tests.fixtures.app import *       # noqa: F401,F403,E402
from tests.fixtures.auth import *      # noqa: F401,F403,E402
from tests.fixtures.storage import *   # noqa: F401,F403,E402
from tests.fixtures.media import *     # noqa: F401,F403,E402
