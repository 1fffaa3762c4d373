"""
Family member records.
Holds the immutable member snapshot a layout run works on, plus adapters from the
camelCase records and relationship edges the interview store keeps.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)

PARENT_CHILD = "parent_child"
PARTNERSHIP = "partnership"
EX_PARTNERSHIP = "ex_partnership"
RELATIONSHIP_TYPES = (PARENT_CHILD, PARTNERSHIP, EX_PARTNERSHIP)


@dataclass(frozen=True)
class FamilyMember:
    id: str
    gender: str = ""
    partner_id: Optional[str] = None
    ex_partner_id: Optional[str] = None
    parent_ids: Tuple[str, ...] = field(default_factory=tuple)
    child_ids: Tuple[str, ...] = field(default_factory=tuple)
    is_ego: bool = False
    label: str = ""
    # Filled in by a layout run; ignored as input.
    layer: Optional[int] = None
    x_pos: Optional[float] = None
    y_pos: Optional[float] = None

    @property
    def is_male(self) -> bool:
        return self.gender == "male"

    @property
    def is_female(self) -> bool:
        return self.gender == "female"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FamilyMember":
        """
        Build a member from a camelCase record such as
        {"id": "mom", "gender": "female", "partnerId": "dad", "childIds": ["self"]}.
        """
        member_id = data.get("id")
        if member_id is None or member_id == "":
            raise ValueError(f"family member record has no id: {dict(data)!r}")
        return cls(
            id=str(member_id),
            gender=str(data.get("gender") or "").lower(),
            partner_id=data.get("partnerId") or None,
            ex_partner_id=data.get("exPartnerId") or None,
            parent_ids=tuple(data.get("parentIds") or ()),
            child_ids=tuple(data.get("childIds") or ()),
            is_ego=bool(data.get("isEgo", False)),
            label=str(data.get("label") or member_id),
            layer=data.get("layer"),
            x_pos=data.get("xPos"),
            y_pos=data.get("yPos"),
        )

    @classmethod
    def coerce(cls, value: Union["FamilyMember", Mapping[str, Any]]) -> "FamilyMember":
        if isinstance(value, cls):
            return value
        return cls.from_dict(value)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "gender": self.gender,
            "label": self.label,
            "isEgo": self.is_ego,
            "parentIds": list(self.parent_ids),
            "childIds": list(self.child_ids),
        }
        if self.partner_id is not None:
            data["partnerId"] = self.partner_id
        if self.ex_partner_id is not None:
            data["exPartnerId"] = self.ex_partner_id
        if self.layer is not None:
            data["layer"] = self.layer
        if self.x_pos is not None:
            data["xPos"] = self.x_pos
        if self.y_pos is not None:
            data["yPos"] = self.y_pos
        return data

    def positioned(self, layer: Optional[int], x_pos: Optional[float], y_pos: Optional[float]) -> "FamilyMember":
        return replace(self, layer=layer, x_pos=x_pos, y_pos=y_pos)


def members_from_dicts(records: Iterable[Union[FamilyMember, Mapping[str, Any]]]) -> List[FamilyMember]:
    return [FamilyMember.coerce(record) for record in records]


def members_from_relationships(
    nodes: Iterable[Mapping[str, Any]],
    edges: Iterable[Mapping[str, Any]],
) -> List[FamilyMember]:
    """
    Convert the interview store's graph (nodes plus typed edges) into member records.

    Parent/child edges run from parent (source) to child (target) and fill both
    parentIds and childIds. Partnership and ex-partnership edges are symmetric.
    Edges that reference unknown nodes are dropped.
    """
    records: Dict[str, Dict[str, Any]] = {}
    for node in nodes:
        member_id = node.get("id")
        if member_id is None:
            raise ValueError(f"node has no id: {dict(node)!r}")
        if member_id in records:
            logger.warning("Duplicate node id %s; keeping the first", member_id)
            continue
        records[member_id] = {
            "id": member_id,
            "gender": node.get("gender", ""),
            "label": node.get("label") or member_id,
            "isEgo": bool(node.get("isEgo", False)),
            "parentIds": [],
            "childIds": [],
        }

    for edge in edges:
        edge_type = edge.get("type")
        if edge_type not in RELATIONSHIP_TYPES:
            raise ValueError(f"unknown relationship type: {edge_type!r}")
        source = records.get(edge.get("source"))
        target = records.get(edge.get("target"))
        if source is None or target is None:
            logger.debug("Dropping %s edge %s -> %s with a missing end", edge_type, edge.get("source"), edge.get("target"))
            continue

        if edge_type == PARENT_CHILD:
            if target["id"] not in source["childIds"]:
                source["childIds"].append(target["id"])
            if source["id"] not in target["parentIds"]:
                target["parentIds"].append(source["id"])
        elif edge_type == PARTNERSHIP:
            source["partnerId"] = target["id"]
            target["partnerId"] = source["id"]
        else:
            source["exPartnerId"] = target["id"]
            target["exPartnerId"] = source["id"]

    return [FamilyMember.from_dict(record) for record in records.values()]
