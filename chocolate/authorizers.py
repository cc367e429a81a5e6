"""
Chocolate Authorizer Set

Sorted set of accounts allowed to finalize other accounts' verification
flows. Adding is idempotent and never fails.
"""

from bisect import bisect_left
from typing import List, Tuple

from .records import AccountRef
from .storage import Storage

AUTHORIZERS_KEY = "authorizers"


class AuthorizerSet:

    def __init__(self, storage: Storage):
        self.storage = storage

    def members(self) -> List[AccountRef]:
        return [AccountRef.from_hex(h) for h in self.storage.get(AUTHORIZERS_KEY) or []]

    def _search(self, members: List[AccountRef], account: AccountRef) -> Tuple[bool, int]:
        position = bisect_left(members, account)
        return position < len(members) and members[position] == account, position

    def add(self, account: AccountRef) -> bool:
        """Insert in sorted position. Returns False if already present."""
        members = self.members()
        found, position = self._search(members, account)
        if found:
            return False
        members.insert(position, account)
        self.storage.insert(AUTHORIZERS_KEY, [m.hex() for m in members])
        return True

    def contains(self, account: AccountRef) -> bool:
        found, _ = self._search(self.members(), account)
        return found

    def __contains__(self, account: AccountRef) -> bool:
        return self.contains(account)

    def __len__(self) -> int:
        return len(self.storage.get(AUTHORIZERS_KEY) or [])
