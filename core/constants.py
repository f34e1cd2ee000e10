"""
Application constants for Dashgate.

Contains durable storage keys, route paths and token timing shared by the
server and the dashboard session client.
"""

# =============================================================================
# Durable Client Storage
# =============================================================================

# Suffixes appended to the configured storage namespace (e.g. "@dashgate")
TOKEN_CACHE_KEY_SUFFIX = "auth-token"
PRE_LOGIN_PATH_KEY_SUFFIX = "pre-login-path"

# Where to go after logging in if no private page requested auth
DEFAULT_PRE_LOGIN_PATH = "/"

# =============================================================================
# Routes
# =============================================================================

LOGIN_PATH = "/login"
SSO_CALLBACK_PATH = "/sso/callback"
DASHBOARD_PATH = "/dashboard"

# =============================================================================
# Tokens
# =============================================================================

# NB: the client refresh cadence is derived from this; keep both sides in sync
TOKEN_LIFETIME_SECONDS = 3600

# Refresh tokens at this fraction of the token lifetime
TOKEN_REFRESH_RATIO = 0.9

BEARER_PREFIX = "Bearer"
