"""
Centralized configuration — all env vars and pipeline constants.
"""
import os


# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = os.getenv('LOG_FORMAT', 'text')

# ── Redis ─────────────────────────────────────────────────────────────────────
REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

# ── PostgreSQL ────────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///local.db')

# ── PlanIt (source API) ───────────────────────────────────────────────────────
PLANIT_BASE_URL = os.getenv('PLANIT_BASE_URL', 'https://www.planit.org.uk')
PLANIT_PAGE_SIZE = 300
PLANIT_MAX_RESULTS = 5000
PLANIT_PAGE_DELAY_SECONDS = float(os.getenv('PLANIT_PAGE_DELAY_SECONDS', '0.5'))
PLANIT_RATE_LIMIT_DEFAULT_WAIT = float(os.getenv('PLANIT_RATE_LIMIT_DEFAULT_WAIT', '5'))
PLANIT_MAX_RETRY_AFTER_SECONDS = float(os.getenv('PLANIT_MAX_RETRY_AFTER_SECONDS', '300'))
PLANIT_MAX_RATE_LIMIT_RETRIES = int(os.getenv('PLANIT_MAX_RATE_LIMIT_RETRIES', '10'))
PLANIT_TIMEOUT_SECONDS = float(os.getenv('PLANIT_TIMEOUT_SECONDS', '45'))

# ── GoHighLevel (CRM) ─────────────────────────────────────────────────────────
GHL_API_URL = os.getenv('GHL_API_URL', 'https://services.leadconnectorhq.com')
GHL_API_VERSION = os.getenv('GHL_API_VERSION', '2021-07-28')
GHL_TIMEOUT_SECONDS = float(os.getenv('GHL_TIMEOUT_SECONDS', '30'))
GHL_SOURCE_TAG = 'planit'
GHL_FALLBACK_CONTACT_NAME = 'Planning Application'

# ── Sync pipeline ─────────────────────────────────────────────────────────────
SYNC_DEFAULT_LOOKBACK_DAYS = 7
SYNC_PUSH_DELAY_SECONDS = float(os.getenv('SYNC_PUSH_DELAY_SECONDS', '0.5'))
SYNC_JOB_TIMEOUT_SECONDS = int(os.getenv('SYNC_JOB_TIMEOUT_SECONDS', '7200'))
# Per-client lock TTL; the manager never lets it drop below the job timeout
SYNC_LOCK_TIMEOUT_SECONDS = int(os.getenv('SYNC_LOCK_TIMEOUT_SECONDS', '7500'))

# ── Slack notifications ──────────────────────────────────────────────────────
SLACK_WEBHOOK_URL = os.getenv('SLACK_WEBHOOK_URL')

# ── Flask ────────────────────────────────────────────────────────────────────
SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-change-me')
