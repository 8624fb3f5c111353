from .blocklist import (
    AuthenticationError,
    BlocklistFetchError,
    BlocklistSource,
    DomainRegistryError,
    HostUnreachableError,
    InvalidAddressError,
    NoDomainsFoundError,
    NoInternetError,
    PiholeHttpError,
    WrongPasswordError,
)
from .probing import Category, Domain, ProbeOutcome, ProbeProgress, is_valid_hostname
from .report import TestMode, TestReport, TestRun

__all__ = [
    "AuthenticationError",
    "BlocklistFetchError",
    "BlocklistSource",
    "Category",
    "Domain",
    "DomainRegistryError",
    "HostUnreachableError",
    "InvalidAddressError",
    "NoDomainsFoundError",
    "NoInternetError",
    "PiholeHttpError",
    "ProbeOutcome",
    "ProbeProgress",
    "TestMode",
    "TestReport",
    "TestRun",
    "WrongPasswordError",
    "is_valid_hostname",
]
