"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Discriminator of the printed member QR payload. Changing it breaks every
# code already handed out.
QR_PAYLOAD_TYPE = "gym_attendance"

QR_SIGNATURE_FIELD = "sig"

DEFAULT_HISTORY_LIMIT = 200

UNKNOWN_FIRST_NAME = "Unknown"
UNKNOWN_LAST_NAME = "Member"
