"""Parser for hosts-format and plain domain-list blocklists.

Recognised line dialects:
 - ``0.0.0.0 ads.example.com`` (null-route prefix, also 127.0.0.1, ::, ::1)
 - ``ads.example.com`` (bare domain)
 - ``# comment`` / ``! comment`` / blank lines (skipped)

Inline ``#`` comments are stripped before tokenizing.
"""

from __future__ import annotations

from collections.abc import Iterator

NULL_ROUTE_PREFIXES = frozenset({"0.0.0.0", "127.0.0.1", "::", "::1"})

RESERVED_NAMES = frozenset(
    {
        "localhost",
        "localhost.localdomain",
        "broadcasthost",
        "local",
        "ip6-localhost",
        "ip6-loopback",
        "ip6-localnet",
        "ip6-mcastprefix",
        "ip6-allnodes",
        "ip6-allrouters",
        "ip6-allhosts",
    }
)

COMMENT_PREFIXES = ("#", "!")


def _candidate(line: str) -> str | None:
    stripped = line.strip()
    if not stripped or stripped.startswith(COMMENT_PREFIXES):
        return None

    content = stripped.split("#", 1)[0]
    tokens = content.split()
    if not tokens:
        return None

    if tokens[0] in NULL_ROUTE_PREFIXES:
        if len(tokens) < 2:
            return None
        return tokens[1]
    return tokens[0]


def _accept(hostname: str) -> bool:
    if hostname in RESERVED_NAMES:
        return False
    if "/" in hostname or ":" in hostname:
        return False
    return "." in hostname


def iter_hosts_file(text: str) -> Iterator[str]:
    """Yield accepted hostnames in file order (duplicates included)."""
    for line in text.splitlines():
        token = _candidate(line)
        if token is None:
            continue
        hostname = token.lower()
        if _accept(hostname):
            yield hostname


def parse_hosts_file(text: str) -> set[str]:
    """Parse a blocklist body into a set of hostnames."""
    return set(iter_hosts_file(text))
