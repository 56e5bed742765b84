"""twcred -- bootstrap and refresh Twitter API OAuth2 credentials.

The Twitter API v2 authenticates user-context requests with OAuth2
Authorization Code flow with PKCE. twcred performs the two steps a
service needs before it can call the API unattended: the first
interactive authorization, and the periodic token refresh.

Typical workflow::

    twcred init -r http://127.0.0.1:8080/callback -o credentials.json
    twcred refresh credentials.json        # from cron, before expiry

Modules:
    app: Typer application and CLI entry point.
    oauth: Authorization URL, callback validation, code exchange, refresh.
    credentials: The persisted credentials record and its file.
    flows: The init/refresh operations, independent of the CLI.
    models: Pydantic models and secret value types.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
