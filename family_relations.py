"""
Relationship index for a family member snapshot.
Built once per layout run so partner, parent and child lookups never rescan the member list.
"""

import logging
from functools import cached_property
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from family_members import FamilyMember

logger = logging.getLogger(__name__)

# Key of a member whose parents are unknown.
NO_PARENTS = "|"


def couple_key(partner1_id: Optional[str], partner2_id: Optional[str]) -> str:
    """
    Canonical id for a pair of members, independent of argument order.
    Missing ids sort last, so a lone parent "a" yields "a|" and no parents yield "|".
    """
    ids = sorted(member_id for member_id in (partner1_id, partner2_id) if member_id)
    ids += [""] * (2 - len(ids))
    return "|".join(ids)


class RelationshipIndex:
    def __init__(self, members: Iterable[FamilyMember]):
        self._by_id: Dict[str, FamilyMember] = {}
        unique = []
        for member in members:
            if member.id in self._by_id:
                logger.warning("Duplicate family member id %s; keeping the first", member.id)
                continue
            self._by_id[member.id] = member
            unique.append(member)
        self.members: Tuple[FamilyMember, ...] = tuple(unique)
        self._order = {member.id: i for i, member in enumerate(self.members)}

        # A parent/child link counts when either side records it and both ends exist.
        links = set()
        for member in self.members:
            for parent_id in member.parent_ids:
                if parent_id in self._by_id and parent_id != member.id:
                    links.add((parent_id, member.id))
            for child_id in member.child_ids:
                if child_id in self._by_id and child_id != member.id:
                    links.add((member.id, child_id))

        self._parents: Dict[str, List[str]] = {member.id: [] for member in self.members}
        self._children: Dict[str, List[str]] = {member.id: [] for member in self.members}
        # Both lists follow input order.
        for parent_id, child_id in sorted(links, key=lambda link: (self._order[link[0]], self._order[link[1]])):
            self._children[parent_id].append(child_id)
            self._parents[child_id].append(parent_id)

        self._couples: Dict[str, Tuple[str, str]] = {}
        for member in self.members:
            partner_id = self.partner_of(member.id)
            if partner_id is not None:
                key = couple_key(member.id, partner_id)
                if key not in self._couples:
                    self._couples[key] = tuple(sorted((member.id, partner_id)))

    def __len__(self):
        return len(self.members)

    def __contains__(self, member_id):
        return member_id in self._by_id

    @property
    def couples(self) -> Tuple[str, ...]:
        return tuple(self._couples)

    def couple_members(self, key: str) -> Tuple[str, str]:
        return self._couples[key]

    @cached_property
    def ego(self) -> Optional[FamilyMember]:
        return next((member for member in self.members if member.is_ego), None)

    def node_by_id(self, member_id: Optional[str]) -> Optional[FamilyMember]:
        if member_id is None:
            return None
        return self._by_id.get(member_id)

    def order_of(self, member_id: str) -> int:
        return self._order[member_id]

    def partner_of(self, member_id: Optional[str]) -> Optional[str]:
        """Id of the member's partner, only when the partnership is mutual."""
        member = self.node_by_id(member_id)
        if member is None:
            return None
        partner = self.node_by_id(member.partner_id)
        if partner is None or partner.id == member.id or partner.partner_id != member.id:
            return None
        return partner.id

    def ex_partner_of(self, member_id: Optional[str]) -> Optional[str]:
        member = self.node_by_id(member_id)
        if member is None:
            return None
        ex_partner = self.node_by_id(member.ex_partner_id)
        if ex_partner is None or ex_partner.id == member.id:
            return None
        return ex_partner.id

    def parents_of(self, member_id: Optional[str]) -> List[str]:
        return list(self._parents.get(member_id, ()))

    def children_of(self, member_id: Optional[str]) -> List[str]:
        return list(self._children.get(member_id, ()))

    def shared_children(self, member_id: str, other_id: str) -> List[str]:
        other_children = set(self._children.get(other_id, ()))
        return [child_id for child_id in self._children.get(member_id, ()) if child_id in other_children]

    def parents_couple_key(self, member_id: Optional[str]) -> str:
        parent_ids = self.parents_of(member_id)
        first = parent_ids[0] if parent_ids else None
        second = parent_ids[1] if len(parent_ids) > 1 else None
        return couple_key(first, second)

    def full_sibling_ids(self, member_id: str) -> List[str]:
        """Members recorded with exactly the same parents."""
        if not self.parents_of(member_id):
            return []
        key = self.parents_couple_key(member_id)
        return [
            member.id
            for member in self.members
            if member.id != member_id and self.parents_couple_key(member.id) == key
        ]

    def half_sibling_ids(self, member_id: str) -> List[str]:
        parent_ids = set(self.parents_of(member_id))
        if not parent_ids:
            return []
        full = set(self.full_sibling_ids(member_id))
        return [
            member.id
            for member in self.members
            if member.id != member_id
            and member.id not in full
            and parent_ids.intersection(self.parents_of(member.id))
        ]

    @cached_property
    def aunts_and_uncles(self) -> FrozenSet[str]:
        if self.ego is None:
            return frozenset()
        ego_parents = self.parents_of(self.ego.id)
        relatives = set()
        for parent_id in ego_parents:
            relatives.update(self.full_sibling_ids(parent_id))
            relatives.update(self.half_sibling_ids(parent_id))
        return frozenset(relatives.difference(ego_parents, [self.ego.id]))

    def is_aunt_or_uncle(self, member_id: str) -> bool:
        return member_id in self.aunts_and_uncles

    def is_cousin(self, member_id: str) -> bool:
        return any(self.is_aunt_or_uncle(parent_id) for parent_id in self.parents_of(member_id))

    def is_ex(self, member_id: str) -> bool:
        """Parentless member known only through a former partnership."""
        return not self.parents_of(member_id) and self.ex_partner_of(member_id) is not None

    def is_half(self, member_id: str) -> bool:
        """
        Half-sibling of ego: a member whose two parents are each other's ex-partners
        and who shares exactly one of them with ego.
        """
        if self.ego is None or member_id == self.ego.id:
            return False
        parent_ids = self.parents_of(member_id)
        if len(parent_ids) < 2:
            return False
        first, second = parent_ids[0], parent_ids[1]
        if self.ex_partner_of(first) != second or self.ex_partner_of(second) != first:
            return False
        ego_parents = set(self.parents_of(self.ego.id))
        return len(ego_parents.intersection((first, second))) == 1

    def is_deferred(self, member_id: str) -> bool:
        """Members placed by the ordering inserts rather than by layer assignment."""
        return self.is_ex(member_id) or self.is_half(member_id) or self.is_cousin(member_id)
