"""
exceptions.py

Responsibility: Defines all custom exception classes used across the application.
Does NOT: contain business logic, logging, or HTTP handling.
"""

from __future__ import annotations


class IpFetchError(Exception):
    """
    Raised by an IP resolver when the WAN address cannot be determined.

    This may occur due to network connectivity issues, a timeout, or an
    unexpected response from the upstream provider (e.g. api.ipify.org or
    the OpenDNS resolvers).
    """


class UnsupportedFamilyError(IpFetchError):
    """
    Raised when the active IP resolver cannot resolve the requested
    address family at all (e.g. IPv6 through the OpenDNS strategy).
    """


class DnsLookupError(Exception):
    """
    Raised by DnsLookup when a DNS query fails for a reason other than the
    name or record type not existing (timeout, SERVFAIL, no nameservers).
    """


class DnsProviderError(Exception):
    """
    Raised by any DNSProvider implementation when a DNS API call fails.

    Includes a human-readable message describing the failure. Callers
    (typically DomainReconciler) must catch this and report a failed outcome.
    """


class FetchError(DnsProviderError):
    """
    Raised by DNSProvider.fetch when the provider's records cannot be read
    (transport error, authentication failure, error response).
    """


class UpdateError(DnsProviderError):
    """
    Raised by DNSProvider.update when the provider rejects or never receives
    the update call for a record.
    """


class ConfigLoadError(Exception):
    """
    Raised by config.load_config when the configuration file is missing,
    references an undefined environment variable, or fails validation.
    """
