# ==============================================================================
# errors.py  –  Exception taxonomy for a sync run
#
#   KickoffSyncError
#     ├── ConfigError           fatal at startup
#     ├── CatalogLoadError      fatal before any storage access
#     ├── ProviderFetchError    recovered by the runner (fetch-failure policy)
#     ├── StorageError          transaction rolled back, propagated
#     └── MembershipParseError  bad bouquet_channels payload
# ==============================================================================

from __future__ import annotations


class KickoffSyncError(Exception):
    """Base class for every error raised by kickoffsync."""


class ConfigError(KickoffSyncError):
    """Required configuration is missing or invalid."""


class CatalogLoadError(KickoffSyncError):
    """The source catalog file is missing or malformed."""


class ProviderFetchError(KickoffSyncError):
    """The schedule provider could not deliver today's events."""


class StorageError(KickoffSyncError):
    """A query failed while the write plan was being applied."""


class MembershipParseError(KickoffSyncError):
    """A persisted membership list could not be decoded."""
