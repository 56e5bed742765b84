"""Fixed Twitter (X) OAuth2 endpoints.

Switching providers means changing these constants, not runtime
configuration.
"""

TWITTER_AUTHORIZE_URL = "https://twitter.com/i/oauth2/authorize"
"""Browser-facing authorize endpoint."""

TWITTER_TOKEN_URL = "https://api.twitter.com/2/oauth2/token"
"""Server-to-server token endpoint for both code exchange and refresh."""
