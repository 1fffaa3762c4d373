"""
Family tree layout engine.
Assigns every member a generation layer, orders each layer so couples, sibling groups and
their partners stay together, then turns the ordering into non-overlapping (x, y) coordinates.
"""

import logging
from collections import deque
from dataclasses import dataclass, fields
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional, Set, Union

from family_members import FamilyMember
from family_relations import NO_PARENTS, RelationshipIndex, couple_key

logger = logging.getLogger(__name__)

_SPACING_ALIASES = {
    "siblingSpacing": "sibling_spacing",
    "siblings": "sibling_spacing",
    "partnerSpacing": "partner_spacing",
    "partners": "partner_spacing",
    "generationSpacing": "generation_spacing",
    "generations": "generation_spacing",
    "startX": "start_x",
    "startY": "start_y",
}


@dataclass(frozen=True)
class LayoutSpacing:
    sibling_spacing: float = 100
    partner_spacing: float = 80
    generation_spacing: float = 100
    start_x: float = 0
    start_y: float = 0

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if value < 0:
                raise ValueError(f"{f.name} must be non-negative, got {value!r}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LayoutSpacing":
        names = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = _SPACING_ALIASES.get(key, key)
            if name not in names:
                raise ValueError(f"unknown spacing option: {key!r}")
            if value is not None:
                kwargs[name] = value
        return cls(**kwargs)


class MemberPosition(NamedTuple):
    layer: int
    x: float
    y: float


class _CoupleUnit(NamedTuple):
    key: str
    left_id: str
    left_parents: str
    right_id: str
    right_parents: str


def _append_unique(items: List[str], item: str) -> None:
    if item not in items:
        items.append(item)


class FamilyTreeLayout:
    """
    Layered pedigree layout.

    The input members are never modified; every run builds its own layer map, layer
    ordering and coordinates. Pass run=False to drive the phases one at a time.
    """

    def __init__(
        self,
        members: Iterable[Union[FamilyMember, Mapping[str, Any]]],
        spacing: Optional[Union[LayoutSpacing, Mapping[str, Any]]] = None,
        run: bool = True,
    ):
        if isinstance(spacing, Mapping):
            spacing = LayoutSpacing.from_dict(spacing)
        self.spacing = spacing or LayoutSpacing()
        self.relations = RelationshipIndex(FamilyMember.coerce(member) for member in members)
        self._layers: Dict[str, int] = {}
        self._groups: Dict[int, List[str]] = {}
        self._x: Dict[str, float] = {}
        self._y: Dict[str, float] = {}
        self._capped: Set[str] = set()
        if run:
            self.run()

    def run(self) -> "FamilyTreeLayout":
        self.assign_layers()
        self.order_layer_groups()
        self.insert_half_siblings()
        self.insert_cousins()
        self.place_unassigned()
        self.assign_coordinates()
        self.adjust_x_coordinates()
        self.offset_coordinates()
        logger.debug("Laid out %d members over %d layers", len(self.relations), len(self.layer_groups))
        return self

    # ----------------------------- Results -----------------------------

    @property
    def couples(self):
        return self.relations.couples

    @property
    def layer_groups(self) -> Dict[int, List[str]]:
        return {layer: list(self._groups[layer]) for layer in sorted(self._groups) if self._groups[layer]}

    @property
    def max_layer(self) -> int:
        return max(self._groups) if self._groups else -1

    @property
    def positions(self) -> Dict[str, MemberPosition]:
        positions = {}
        for member in self.relations.members:
            member_id = member.id
            if member_id in self._layers and member_id in self._x and member_id in self._y:
                positions[member_id] = MemberPosition(self._layers[member_id], self._x[member_id], self._y[member_id])
        return positions

    @property
    def members(self) -> List[FamilyMember]:
        return [
            member.positioned(self._layers.get(member.id), self._x.get(member.id), self._y.get(member.id))
            for member in self.relations.members
        ]

    def node_by_id(self, member_id: str) -> Optional[FamilyMember]:
        member = self.relations.node_by_id(member_id)
        if member is None:
            return None
        return member.positioned(self._layers.get(member_id), self._x.get(member_id), self._y.get(member_id))

    def node_layer(self, member_id: str) -> Optional[int]:
        return self._layers.get(member_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "members": [member.to_dict() for member in self.members],
            "layer_groups": self.layer_groups,
            "couples": list(self.couples),
            "positions": {member_id: (pos.x, pos.y) for member_id, pos in self.positions.items()},
        }

    # ----------------------------- Layer bookkeeping -----------------------------

    def _assign_node_layer(self, member_id: str, layer: int, index: Optional[int] = None) -> None:
        """Move a member to the end of a layer (or to index), leaving its previous layer."""
        self._unassign(member_id)
        group = self._groups.setdefault(layer, [])
        if index is None:
            group.append(member_id)
        else:
            group.insert(index, member_id)
        self._layers[member_id] = layer

    def _unassign(self, member_id: str) -> None:
        previous = self._layers.pop(member_id, None)
        if previous is not None and member_id in self._groups.get(previous, ()):
            self._groups[previous].remove(member_id)

    def _layer_limit(self) -> int:
        return max(len(self.relations) - 1, 0)

    def _can_raise(self, member_id: str, layer: int) -> bool:
        if layer <= self._layer_limit():
            return True
        if member_id not in self._capped:
            self._capped.add(member_id)
            logger.warning("Layer of %s capped at %d; parent/child references form a cycle", member_id, self._layer_limit())
        return False

    # ----------------------------- Layer assignment -----------------------------

    def assign_layers(self) -> None:
        """
        Give every member a generation layer: parentless members start at 0, children sit
        one layer below their deepest parent, parents are pulled down to sit right above
        their children, and partners share the deeper of their two layers.
        """
        relations = self.relations
        queue = deque()
        for member in relations.members:
            if relations.is_deferred(member.id):
                continue
            if not relations.parents_of(member.id):
                self._assign_node_layer(member.id, 0)
                queue.append((member.id, 0))

        while queue:
            member_id, layer = queue.popleft()
            for child_id in relations.children_of(member_id):
                if relations.is_half(child_id) or relations.is_cousin(child_id):
                    continue
                next_layer = layer + 1
                previous = self._layers.get(child_id)
                if (previous is None or next_layer > previous) and self._can_raise(child_id, next_layer):
                    self._assign_node_layer(child_id, next_layer)
                    queue.append((child_id, next_layer))

        changed = True
        while changed:
            changed = self._pull_parents_down()
            changed = self._reconcile_couples() or changed
            changed = self._push_children_down() or changed

    def _pull_parents_down(self) -> bool:
        relations = self.relations
        changed_any = False
        changed = True
        while changed:
            changed = False
            for member in relations.members:
                if relations.is_deferred(member.id):
                    continue
                for child_id in relations.children_of(member.id):
                    child_layer = self._layers.get(child_id)
                    if child_layer is None:
                        continue
                    desired = max(child_layer - 1, 0)
                    previous = self._layers.get(member.id)
                    if previous is None or previous < desired:
                        self._assign_node_layer(member.id, desired)
                        changed = changed_any = True
        return changed_any

    def _reconcile_couples(self) -> bool:
        changed = False
        for key in self.relations.couples:
            first, second = self.relations.couple_members(key)
            first_layer = self._layers.get(first)
            second_layer = self._layers.get(second)
            if first_layer is not None and second_layer is None:
                self._assign_node_layer(second, first_layer)
                changed = True
            elif second_layer is not None and first_layer is None:
                self._assign_node_layer(first, second_layer)
                changed = True
            elif first_layer is not None and second_layer is not None and first_layer != second_layer:
                target = max(first_layer, second_layer)
                self._assign_node_layer(first, target)
                self._assign_node_layer(second, target)
                changed = True
        return changed

    def _push_children_down(self) -> bool:
        relations = self.relations
        changed = False
        for member in relations.members:
            layer = self._layers.get(member.id)
            if layer is None:
                continue
            for child_id in relations.children_of(member.id):
                if relations.is_half(child_id) or relations.is_cousin(child_id):
                    continue
                child_layer = self._layers.get(child_id)
                if (child_layer is None or child_layer <= layer) and self._can_raise(child_id, layer + 1):
                    self._assign_node_layer(child_id, layer + 1)
                    changed = True
        return changed

    # ----------------------------- Layer ordering -----------------------------

    def order_layer_groups(self) -> None:
        """
        Order each layer from the deepest up. Members are grouped by their parents' couple,
        in the order those parent couples first appear; within a group solos come first,
        then couples in the order their children took on the layer below, then childless
        couples next to their siblings. Couples are emitted female first.
        """
        relations = self.relations
        # Parent couple keys in the order the layer below placed their children.
        last_level_parent_keys: List[str] = []
        for layer in range(self.max_layer, -1, -1):
            current = self._groups.get(layer, [])
            in_layer = set(current)
            solos: Dict[str, List[str]] = {}
            couples: Dict[str, List[_CoupleUnit]] = {}
            placed: Set[str] = set()
            parent_keys: List[str] = []

            for member_id in current:
                if member_id in placed:
                    continue
                partner_id = relations.partner_of(member_id)
                if partner_id is not None and partner_id in in_layer:
                    member = relations.node_by_id(member_id)
                    left_id, right_id = (partner_id, member_id) if member.is_male else (member_id, partner_id)
                    left_key = relations.parents_couple_key(left_id)
                    right_key = relations.parents_couple_key(right_id)
                    # A partner without known parents follows the family they married into.
                    if left_key == NO_PARENTS:
                        left_key = right_key
                    if right_key == NO_PARENTS:
                        right_key = left_key
                    unit = _CoupleUnit(couple_key(left_id, right_id), left_id, left_key, right_id, right_key)

                    couples.setdefault(left_key, []).append(unit)
                    if right_key in parent_keys and left_key not in parent_keys:
                        parent_keys.insert(parent_keys.index(right_key), left_key)
                    elif left_key not in parent_keys:
                        parent_keys.append(left_key)
                    if right_key != left_key:
                        couples.setdefault(right_key, []).append(unit)
                        if left_key in parent_keys and right_key not in parent_keys:
                            parent_keys.insert(parent_keys.index(left_key) + 1, right_key)
                        elif right_key not in parent_keys:
                            parent_keys.append(right_key)
                    placed.add(partner_id)
                else:
                    parents_key = relations.parents_couple_key(member_id)
                    solos.setdefault(parents_key, []).append(member_id)
                    _append_unique(parent_keys, parents_key)
                placed.add(member_id)

            ordered: List[str] = []
            placed_couples: Set[str] = set()
            ordered_parent_keys: List[str] = []
            for parents_key in parent_keys:
                ordered.extend(solos.get(parents_key, []))
                _append_unique(ordered_parent_keys, parents_key)
                related = list(couples.get(parents_key, []))
                for child_parents_key in last_level_parent_keys:
                    for unit in related:
                        if unit.key != child_parents_key or unit.key in placed_couples:
                            continue
                        ordered.extend((unit.left_id, unit.right_id))
                        placed_couples.add(unit.key)
                        _append_unique(ordered_parent_keys, unit.left_parents)
                        _append_unique(ordered_parent_keys, unit.right_parents)
                    related = [unit for unit in related if unit.key != child_parents_key and unit.key not in placed_couples]
                # Couples without children on the layer below.
                for unit in related:
                    if unit.key in placed_couples:
                        continue
                    self._insert_childless_couple(ordered, unit)
                    placed_couples.add(unit.key)
                    _append_unique(ordered_parent_keys, unit.left_parents)

            last_level_parent_keys = ordered_parent_keys
            if layer in self._groups:
                self._groups[layer] = ordered
                self._insert_ex_partners(layer)

    def _insert_childless_couple(self, ordered: List[str], unit: _CoupleUnit) -> None:
        relations = self.relations
        target = next(
            (
                i for i, member_id in enumerate(ordered)
                if relations.parents_couple_key(member_id) in (unit.left_parents, unit.right_parents)
            ),
            None,
        )
        pair = [unit.left_id, unit.right_id]
        if target is None:
            ordered.extend(pair)
        elif target > 0 and relations.partner_of(ordered[target - 1]) == ordered[target]:
            # the sibling found closes a couple; go after it
            ordered[target + 1:target + 1] = pair
        else:
            ordered[target:target] = pair

    def _insert_ex_partners(self, layer: int) -> None:
        """Place unlayered ex-partners beside their former partner: men left, women right."""
        relations = self.relations
        ordered = self._groups[layer]
        for member in relations.members:
            if member.id in self._layers or not relations.is_ex(member.id):
                continue
            ex_partner_id = relations.ex_partner_of(member.id)
            if ex_partner_id not in ordered:
                continue
            index = ordered.index(ex_partner_id)
            self._assign_node_layer(member.id, layer, index if member.is_male else index + 1)

    def insert_half_siblings(self) -> None:
        """Maternal half-siblings go left of ego's full siblings, paternal ones to the right."""
        relations = self.relations
        ego = relations.ego
        if ego is None or ego.id not in self._layers:
            return
        ego_layer = self._layers[ego.id]
        parent_ids = relations.parents_of(ego.id)
        mother_id = next((pid for pid in parent_ids if relations.node_by_id(pid).is_female), None)
        father_id = next((pid for pid in parent_ids if relations.node_by_id(pid).is_male), None)
        half_siblings = [member.id for member in relations.members if relations.is_half(member.id)]
        inserted = []

        if mother_id is not None:
            maternal = [hid for hid in half_siblings if mother_id in relations.parents_of(hid)]
            for half_id in maternal:
                self._unassign(half_id)
            ordered = self._groups[ego_layer]
            index = next((i for i, mid in enumerate(ordered) if mother_id in relations.parents_of(mid)), 0)
            for offset, half_id in enumerate(maternal):
                self._assign_node_layer(half_id, ego_layer, index + offset)
            inserted.extend(maternal)

        if father_id is not None:
            paternal = [
                hid for hid in half_siblings
                if father_id in relations.parents_of(hid) and hid not in inserted
            ]
            for half_id in paternal:
                self._unassign(half_id)
            ordered = self._groups[ego_layer]
            children = [i for i, mid in enumerate(ordered) if father_id in relations.parents_of(mid)]
            index = len(ordered)
            if children:
                index = children[-1] + 1
                if index < len(ordered) and relations.partner_of(ordered[index - 1]) == ordered[index]:
                    index += 1
            for offset, half_id in enumerate(paternal):
                self._assign_node_layer(half_id, ego_layer, index + offset)
            inserted.extend(paternal)

        self._settle(inserted)

    def insert_cousins(self) -> None:
        """
        Put each cousin into ego's layer right after the children of the nearest earlier
        member of the parents' layer, so cousins sit under their own parents.
        """
        relations = self.relations
        ego = relations.ego
        if ego is None or ego.id not in self._layers:
            return
        cousins = [member.id for member in relations.members if relations.is_cousin(member.id)]
        ego_parents = relations.parents_of(ego.id)
        if not cousins or not ego_parents or ego_parents[0] not in self._layers:
            return

        for cousin_id in cousins:
            self._unassign(cousin_id)
        ego_layer = self._layers[ego.id]
        ordered = self._groups[ego_layer]
        parent_layer_ids = list(self._groups.get(self._layers[ego_parents[0]], []))
        cousin_parent_ids = {pid for cousin_id in cousins for pid in relations.parents_of(cousin_id)}
        placed: List[str] = []

        for index, parent_id in enumerate(parent_layer_ids):
            if parent_id not in cousin_parent_ids:
                continue
            target = 0
            for previous_id in reversed(parent_layer_ids[:index]):
                if not relations.parents_of(previous_id):
                    continue
                previous_children = set(relations.children_of(previous_id))
                child_indexes = [i for i, mid in enumerate(ordered) if mid in previous_children]
                if not child_indexes:
                    continue
                target = child_indexes[-1]
                following = ordered[target + 1] if target + 1 < len(ordered) else None
                if following is not None and ordered[target] in (
                    relations.partner_of(following),
                    relations.ex_partner_of(following),
                ):
                    target += 1
                target += 1
                break

            current = [
                cousin_id for cousin_id in cousins
                if cousin_id not in placed and parent_id in relations.parents_of(cousin_id)
            ]
            for offset, cousin_id in enumerate(current):
                self._assign_node_layer(cousin_id, ego_layer, target + offset)
            placed.extend(current)

        self._settle(placed)

    def _settle(self, member_ids: List[str]) -> None:
        """Bring partners of freshly inserted members alongside them and move their descendants below."""
        relations = self.relations
        queue = deque()
        for member_id in member_ids:
            layer = self._layers.get(member_id)
            if layer is None:
                continue
            partner_id = relations.partner_of(member_id)
            if partner_id is not None and self._layers.get(partner_id) != layer:
                self._unassign(partner_id)
                index = self._groups[layer].index(member_id)
                partner = relations.node_by_id(partner_id)
                self._assign_node_layer(partner_id, layer, index if partner.is_female else index + 1)
                queue.append(partner_id)
            queue.append(member_id)

        while queue:
            member_id = queue.popleft()
            layer = self._layers[member_id]
            for child_id in relations.children_of(member_id):
                child_layer = self._layers.get(child_id)
                if child_layer is not None and child_layer > layer:
                    continue
                if not self._can_raise(child_id, layer + 1):
                    continue
                self._assign_node_layer(child_id, layer + 1)
                queue.append(child_id)

    def place_unassigned(self) -> None:
        """Give any member the phases above skipped a layer next to a placed relative."""
        pending = [member.id for member in self.relations.members if member.id not in self._layers]
        if not pending:
            return
        logger.warning("Placing %d member(s) without a computed layer: %s", len(pending), ", ".join(pending))
        while pending:
            progress = False
            for member_id in list(pending):
                layer = self._fallback_layer(member_id)
                if layer is None:
                    continue
                self._assign_node_layer(member_id, layer)
                pending.remove(member_id)
                progress = True
            if not progress:
                self._assign_node_layer(pending.pop(0), 0)

    def _fallback_layer(self, member_id: str) -> Optional[int]:
        relations = self.relations
        parent_layers = [self._layers[pid] for pid in relations.parents_of(member_id) if pid in self._layers]
        if parent_layers:
            return max(parent_layers) + 1
        for relative_id in (relations.partner_of(member_id), relations.ex_partner_of(member_id)):
            if relative_id in self._layers:
                return self._layers[relative_id]
        child_layers = [self._layers[cid] for cid in relations.children_of(member_id) if cid in self._layers]
        if child_layers:
            return max(min(child_layers) - 1, 0)
        return None

    # ----------------------------- Coordinates -----------------------------

    def assign_coordinates(self) -> None:
        """
        Walk layers from the deepest up with a left-to-right cursor. Couples with children
        are centered over their shared children, solos and childless couples take the
        cursor, and nothing is placed left of what the layer already holds.
        """
        relations = self.relations
        sibling_spacing = self.spacing.sibling_spacing
        placed: Set[str] = set()
        for layer in range(self.max_layer, -1, -1):
            y = layer * self.spacing.generation_spacing
            next_x = 0.0
            for member_id in list(self._groups.get(layer, [])):
                if member_id in placed:
                    continue
                self._y[member_id] = y
                partner_id = relations.partner_of(member_id)
                if partner_id is not None and self._layers.get(partner_id) == layer:
                    self._place_with(member_id, partner_id, next_x)
                    self._y[partner_id] = y
                    placed.update((member_id, partner_id))
                    next_x = max(self._x[member_id], self._x[partner_id]) + sibling_spacing
                    continue

                children = relations.children_of(member_id)
                ex_partner_id = relations.ex_partner_of(member_id)
                if children and ex_partner_id is not None and self._layers.get(ex_partner_id) == layer:
                    self._place_with(member_id, ex_partner_id, next_x)
                    self._y[ex_partner_id] = y
                    placed.update((member_id, ex_partner_id))
                    next_x = max(self._x[member_id], self._x[ex_partner_id]) + sibling_spacing
                elif children:
                    self._x[member_id] = self._center_over(children, next_x)
                    placed.add(member_id)
                    next_x = self._x[member_id] + sibling_spacing
                else:
                    self._x[member_id] = next_x
                    placed.add(member_id)
                    next_x += sibling_spacing

    def _place_with(self, member_id: str, other_id: str, next_x: float) -> None:
        """Place a member and its (ex-)partner as a pair, or beside the other if already placed."""
        partner_spacing = self.spacing.partner_spacing
        if other_id in self._x:
            self._place_beside(member_id, other_id)
            return

        shared = self.relations.shared_children(member_id, other_id)
        child_xs = [self._x[child_id] for child_id in shared if child_id in self._x]
        if not child_xs:
            self._x[member_id] = next_x
            self._x[other_id] = next_x + partner_spacing
            return

        center_x = sum(child_xs) / len(child_xs)
        left_x = center_x - partner_spacing / 2
        right_x = center_x + partner_spacing / 2
        if next_x > 0:
            left_x = max(next_x, left_x)
            right_x = max(next_x + partner_spacing, right_x)
        self._x[member_id] = left_x
        self._x[other_id] = right_x

    def _center_over(self, children: List[str], next_x: float) -> float:
        child_xs = [self._x[child_id] for child_id in children if child_id in self._x]
        if not child_xs:
            return next_x
        center_x = sum(child_xs) / len(child_xs)
        return max(next_x, center_x) if next_x > 0 else center_x

    def _place_beside(self, member_id: str, placed_id: str) -> None:
        relations = self.relations
        anchor = relations.node_by_id(placed_id)
        anchor_x = self._x[placed_id]
        partners = relations.partner_of(member_id) == placed_id
        if (partners and anchor.is_male) or (not partners and anchor.is_female):
            self._insert_node_at(member_id, anchor_x - self.spacing.partner_spacing)
        else:
            self._insert_node_at(member_id, anchor_x + self.spacing.partner_spacing)

    def _insert_node_at(self, member_id: str, desired_x: float) -> None:
        """
        Put a member at desired_x, or right of the nearest placed member left of it,
        shifting the members to its right by the same amount.
        """
        relations = self.relations
        others = [
            mid for mid in self._groups.get(self._layers[member_id], [])
            if mid != member_id and mid in self._x
        ]
        previous = [mid for mid in others if self._x[mid] <= desired_x]
        x = desired_x
        if previous:
            previous_id = previous[-1]
            space = self.spacing.sibling_spacing
            if member_id in (relations.partner_of(previous_id), relations.ex_partner_of(previous_id)):
                space = self.spacing.partner_spacing
            x = max(desired_x, self._x[previous_id] + space)
        self._x[member_id] = x

        offset = x - desired_x
        if offset > 0:
            for mid in others:
                if self._x[mid] >= x:
                    self._x[mid] += offset

    def adjust_x_coordinates(self) -> None:
        """Shift everything right so the leftmost member sits at x = 0."""
        if not self._x:
            return
        leftmost_x = min(0, min(self._x.values()))
        if leftmost_x == 0:
            return
        for member_id in self._x:
            self._x[member_id] -= leftmost_x

    def offset_coordinates(self) -> None:
        for member_id in self._x:
            self._x[member_id] += self.spacing.start_x
        for member_id in self._y:
            self._y[member_id] += self.spacing.start_y


def compute_family_layout(
    members: Iterable[Union[FamilyMember, Mapping[str, Any]]],
    sibling_spacing: float = 100,
    partner_spacing: float = 80,
    generation_spacing: float = 100,
    start_x: float = 0,
    start_y: float = 0,
) -> Dict[str, Any]:
    """
    Compute a deterministic pedigree layout for a member snapshot.
    Returns a dict with positioned members, layer_groups, couples and (x, y) positions.
    """
    spacing = LayoutSpacing(
        sibling_spacing=sibling_spacing,
        partner_spacing=partner_spacing,
        generation_spacing=generation_spacing,
        start_x=start_x,
        start_y=start_y,
    )
    return FamilyTreeLayout(members, spacing).to_dict()
