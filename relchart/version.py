# relchart/version.py
from __future__ import annotations
import os

# Single place to bump the app version (overridable via env for CI/preview)
VERSION = os.getenv("RELCHART_VERSION", "0.1.0")

# Stamped on every analysis; changes whenever scoring tables change.
SYSTEM_VERSION = f"wrcs-{VERSION}"
