"""Classification registry.

Name sets filled in pass order while the transformer runs. A pass sees
every name registered by earlier passes and never edits them. One registry
belongs to one Transformer instance and is discarded with it.
"""

import logging
from typing import Dict, Optional, Set

from .models import MemberRole

logger = logging.getLogger(__name__)

# Resolution precedence, highest first
_PRECEDENCE = (
    MemberRole.STATE,
    MemberRole.INPUT,
    MemberRole.AMBIENT_READ,
    MemberRole.METHOD,
)

# Computed values resolve with State standing
_STANDING = {
    MemberRole.STATE: MemberRole.STATE,
    MemberRole.COMPUTED: MemberRole.STATE,
    MemberRole.INPUT: MemberRole.INPUT,
    MemberRole.AMBIENT_READ: MemberRole.AMBIENT_READ,
    MemberRole.METHOD: MemberRole.METHOD,
}


class ClassificationRegistry:
    """Append-only name sets with a fixed resolution precedence.

    State/Computed > Input > AmbientRead > Method > unresolved.
    """

    def __init__(self):
        self._names: Dict[MemberRole, Set[str]] = {role: set() for role in _PRECEDENCE}

    def register(self, role: MemberRole, name: str) -> None:
        if role not in _STANDING:
            raise ValueError(f"Role {role.value} is not resolvable")
        self._names[_STANDING[role]].add(name)
        logger.debug(f"Registered {role.value}: {name}")

    def resolve(self, name: str) -> Optional[MemberRole]:
        """Role a `this.<name>` access resolves to, or None when unknown.

        Computed names resolve to STATE since both dereference the same way.
        """
        for role in _PRECEDENCE:
            if name in self._names[role]:
                return role
        return None
