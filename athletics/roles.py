from __future__ import annotations

from enum import Enum


class ClubRole(str, Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    COACH = "COACH"
    MEMBER = "MEMBER"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def meets(self, minimum: "ClubRole") -> bool:
        return self.rank >= minimum.rank


_RANKS = {
    ClubRole.MEMBER: 1,
    ClubRole.COACH: 2,
    ClubRole.ADMIN: 3,
    ClubRole.OWNER: 4,
}

# age groups, disciplines, seasons and memberships
MANAGE_ROLE = ClubRole.ADMIN
# reads, athletes and performances
READ_ROLE = ClubRole.MEMBER
