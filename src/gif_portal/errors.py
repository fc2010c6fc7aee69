"""Exception hierarchy shared by the portal components."""

from __future__ import annotations


class PortalError(Exception):
    """Base class for every error raised by the portal client."""


class ConfigError(PortalError):
    """Static configuration (IDL, keypair, network) could not be loaded."""


class SignerError(PortalError):
    """Raised by the signer extension."""


class SignerUnavailableError(SignerError):
    """No signer extension is installed."""


class SignerKindError(SignerError):
    """A signer is installed but it is not the kind the portal expects."""


class AuthenticationRejectedError(SignerError):
    """The user declined to connect or to sign."""


class LedgerError(PortalError):
    """Raised by the ledger client for any non-success outcome."""


class RecordAlreadyInitializedError(LedgerError):
    """The shared record already exists; it is usable as-is."""


class RecordUninitializedError(LedgerError):
    """The program rejected an append because the record was never created."""


class RecordNotFoundError(LedgerError):
    """The record account does not exist yet."""


class LedgerRpcError(LedgerError):
    """Any transport, timeout or program failure that is not one of the above."""
