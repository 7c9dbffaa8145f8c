"""Root conftest — shared test configuration."""

import os

# Deterministic identities and an isolated database for every test run
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ADMIN_ADDRESS", "0x" + "a" * 40)
os.environ.setdefault("CHARITY_PAYOUT_ADDRESS", "0x" + "c" * 40)
os.environ.setdefault("BASE_LOCATOR", "https://x/")
os.environ.setdefault("PAYMENT_RAIL_AUTO_APPROVE", "false")
os.environ.setdefault("LOG_FORMAT", "text")
