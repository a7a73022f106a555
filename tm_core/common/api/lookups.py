# tm_core/common/api/lookups.py
from __future__ import annotations

# Router-level pk pattern: malformed ids fall through to a plain 404.
UUID_LOOKUP_REGEX = "[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
