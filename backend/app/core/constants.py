"""Shared running-session constants.

Centralizes the lifecycle defaults used by the service and the sweeper so
we can document and adjust them in one place.
"""

# In-progress sessions untouched for longer than this are purged
RUNNING_TTL_MINUTES = 15

# Period of the expiry sweeper (seconds)
SWEEP_INTERVAL_SECONDS = 180

# How long stop() waits for the sweeper thread to finish its current pass
SWEEPER_JOIN_TIMEOUT_SECONDS = 10.0

# Last instant included in a month window (inclusive 23:59:59)
END_OF_DAY = (23, 59, 59)
