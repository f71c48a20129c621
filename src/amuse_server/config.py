"""
Configuration for the Amuse gesture server.

Every value can be overridden with an environment variable (or a ``.env``
file in the working directory) so deployments never need to touch code.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Gesture table
# ---------------------------------------------------------------------------
# Built-in table name ("peace-sign" or "spider-man") or a path to a JSON
# table file.
GESTURE_TABLE = os.environ.get("AMUSE_GESTURE_TABLE", "peace-sign")

# ---------------------------------------------------------------------------
# Immersive space
# ---------------------------------------------------------------------------
# Seconds to wait for a client to report the outcome of an open request
# before treating it as an error.
SPACE_OPEN_TIMEOUT_S = float(os.environ.get("AMUSE_SPACE_OPEN_TIMEOUT", "10"))

# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------
# Number of diagnostic records (unknown gestures, ignored toggles, ...) kept
# for the status endpoint.
DIAGNOSTIC_HISTORY = int(os.environ.get("AMUSE_DIAGNOSTIC_HISTORY", "50"))

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.environ.get("AMUSE_LOG_LEVEL", "INFO").upper()
