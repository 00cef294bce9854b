"""bnetexport -- Export a Battle.net Authenticator to any TOTP app.

This package restores a Battle.net Authenticator enrollment through the
provider's own APIs and converts the resulting device secret into a standard
``otpauth://`` URI. The flow needs three inputs: a web session token (the
``ST=...`` value), the authenticator serial, and its restore code.

Typical workflow::

    bnet-export export --serial US-1234-5678-9012
    # paste the session token and restore code when prompted

Modules:
    app: Typer application and CLI entry point.
    export: The end-to-end export flow.
    client: Battle.net SSO and authenticator REST clients.
    codec: Hex to Base32 conversion and otpauth URI rendering.
    models: Pydantic models for wire payloads and configuration.
    config: XDG-aware configuration with env var overrides.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
