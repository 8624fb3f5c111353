from .blocklist_fetcher import BlocklistFetcherPort
from .domain_prober import DomainProberPort
from .probe_transport import ProbeFailure, ProbeTransportPort

__all__ = [
    "BlocklistFetcherPort",
    "DomainProberPort",
    "ProbeFailure",
    "ProbeTransportPort",
]
