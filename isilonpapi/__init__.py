"""Top-level package for isilonpapi, a OneFS Platform API client."""
__author__ = """isilonpapi maintainers"""
__version__ = '0.1.0'

import logging

from isilonpapi.api import ACL, FileMode, Persona, PersonaID, Quota, QuotaThresholds, QuotaUsage, Snapshot, Volume
from isilonpapi.client import IsilonClient
from isilonpapi.config import Settings
from isilonpapi.core import ClientOptions, OrderedValues, PapiClient
from isilonpapi.exceptions import (
    ClientConfigError,
    IsilonError,
    NotFoundError,
    PapiDecodeError,
    PapiError,
    QuotaNotFoundError,
    SnapshotNotFoundError,
    UnsupportedVersionError,
)

logging.getLogger("isilonpapi").addHandler(logging.NullHandler())

__all__ = [
    # Main interfaces
    'IsilonClient',
    'Settings',
    # Resource types
    'ACL',
    'FileMode',
    'Persona',
    'PersonaID',
    'Quota',
    'QuotaThresholds',
    'QuotaUsage',
    'Snapshot',
    'Volume',
    # Low-level plumbing
    'ClientOptions',
    'OrderedValues',
    'PapiClient',
    # Errors
    'ClientConfigError',
    'IsilonError',
    'NotFoundError',
    'PapiDecodeError',
    'PapiError',
    'QuotaNotFoundError',
    'SnapshotNotFoundError',
    'UnsupportedVersionError',
]
