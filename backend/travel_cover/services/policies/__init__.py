"""Policy Services"""

from .policy_store import PolicyStore, parse_duration

__all__ = [
    'PolicyStore',
    'parse_duration',
]
