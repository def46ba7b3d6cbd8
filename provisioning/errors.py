# provisioning/errors.py
# -*- coding: utf-8 -*-
"""
Error taxonomy for provisioning runs.

Every error carries a distinct ``exit_code`` so the CLI can report which
gate failed. ``SelectionCancelled`` deliberately derives from
``KeyboardInterrupt``: an operator abort terminates the whole run and must
never be absorbed by an ``except Exception`` handler.
"""


class ProvisionerError(Exception):
    """Base class for all provisioning failures."""

    exit_code: int = 1


class PreconditionFailure(ProvisionerError):
    """Host resources do not satisfy a static threshold."""

    exit_code = 10


class CatalogUnavailable(ProvisionerError):
    """The remote version listing could not be fetched."""

    exit_code = 20


class EmptyCatalog(ProvisionerError):
    """The listing was fetched but contained no versions."""

    exit_code = 21


class DownloadFailure(ProvisionerError):
    """A release artifact could not be located or downloaded."""

    exit_code = 30


class DownloadTimeout(DownloadFailure):
    """A network call exceeded the configured timeout."""

    exit_code = 31


class MalformedArchive(ProvisionerError):
    """The extracted archive does not have the expected layout."""

    exit_code = 40


class ArchiveToolUnavailable(ProvisionerError):
    """The host lacks the tool needed to extract the archive."""

    exit_code = 41


class BootstrapError(ProvisionerError):
    """Cluster identity bootstrap failed."""

    exit_code = 52


class LogDirRemovalFailed(BootstrapError):
    """A stale durable log directory could not be removed."""

    exit_code = 50


class IdentityIntegrityError(BootstrapError):
    """The persisted cluster id differs from the generated one."""

    exit_code = 51


class EnvPersistenceFailure(ProvisionerError):
    """An environment variable could not be persisted."""

    exit_code = 60


class BrokerStartFailure(ProvisionerError):
    """The broker process exited before the settle delay elapsed."""

    exit_code = 70


class SelectionCancelled(KeyboardInterrupt):
    """The operator cancelled an interactive selection."""
