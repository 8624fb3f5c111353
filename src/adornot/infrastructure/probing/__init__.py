from .errors import failure_kind_from_exception
from .prober import HttpDomainProber, probe_url
from .transport import HttpxProbeTransport, build_probe_client

__all__ = [
    "HttpDomainProber",
    "HttpxProbeTransport",
    "build_probe_client",
    "failure_kind_from_exception",
    "probe_url",
]
