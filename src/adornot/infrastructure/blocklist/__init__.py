from .hosts_parser import iter_hosts_file, parse_hosts_file
from .pihole import (
    PiholeBlocklistFetcher,
    friendly_list_name,
    normalize_endpoint,
    sample_size_for,
)

__all__ = [
    "PiholeBlocklistFetcher",
    "friendly_list_name",
    "iter_hosts_file",
    "normalize_endpoint",
    "parse_hosts_file",
    "sample_size_for",
]
