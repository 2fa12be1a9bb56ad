"""Core constants: cache key prefixes and shared literal values."""

# Cache key prefixes
CACHE_PREFIX_DEDUP = "dedup"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Error strings recorded on action results / executions
ERROR_NOT_CONNECTED = "not_connected"
ERROR_TIMEOUT = "timeout"
ERROR_WORKFLOW_DELETED = "workflow_deleted"
ERROR_NO_ACTIONS = "workflow_has_no_actions"
