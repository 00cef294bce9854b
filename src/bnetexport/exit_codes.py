"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~bnetexport.exceptions.ExportError` subclass.
Shell wrappers can inspect the exit code to tell a rejected session token
from a network outage without parsing stderr.

Example::

    $ bnet-export export --no-input -t "$ST" -s "$SERIAL" -r "$CODE"
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the provider rejected the credentials
"""

EXIT_SUCCESS = 0
"""The export completed and the otpauth URI was printed."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""A required input was missing or empty."""

EXIT_AUTH_FAILURE = 3
"""The provider answered HTTP 401 or 403."""

EXIT_PROTOCOL_ERROR = 5
"""The provider answered with an error status or an unusable body."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, TLS, connection refused)."""

EXIT_PRECONDITION_FAILED = 8
"""The restore call was attempted without a bearer token."""

EXIT_ENCODING_ERROR = 9
"""The device secret returned by the provider was not valid hexadecimal."""
