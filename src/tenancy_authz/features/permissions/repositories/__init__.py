"""Permission repositories package.

Concrete implementations of the MembershipStore protocol.
"""

from .asyncpg_membership_store import AsyncPGMembershipStore
from .memory_membership_store import InMemoryMembershipStore

__all__ = [
    "AsyncPGMembershipStore",
    "InMemoryMembershipStore",
]
