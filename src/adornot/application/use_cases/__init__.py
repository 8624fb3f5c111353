from .pihole_check import PiholeConnectionCheckUseCase
from .reachability_test import ReachabilityTestUseCase, unique_by_hostname

__all__ = [
    "PiholeConnectionCheckUseCase",
    "ReachabilityTestUseCase",
    "unique_by_hostname",
]
