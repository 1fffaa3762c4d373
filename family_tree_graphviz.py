"""
GraphViz export for family tree layouts.
Builds a Digraph with every member pinned at its computed position.
"""

from typing import Optional

from graphviz import Digraph

from family_tree_layout import FamilyTreeLayout

# Formatting for invisible couple points
_COUPLE_POINT = {"shape": "point", "width": "0.01", "height": "0.01", "label": ""}


def _pos(x, y):
    # Graphviz y grows upward
    return f"{x:g},{-y if y else 0:g}!"


def _member_attrs(member):
    if member.is_male:
        shape, color = "square", "cornflowerblue"
    elif member.is_female:
        shape, color = "ellipse", "lightcoral"
    else:
        shape, color = "ellipse", "lightgray"
    attrs = {
        "label": member.label or member.id,
        "shape": shape,
        "style": "filled",
        "fillcolor": color,
        "color": color,
    }
    if member.is_ego:
        attrs["penwidth"] = "3"
        attrs["color"] = "black"
    return attrs


def layout_to_graphviz(layout: FamilyTreeLayout, comment: str = "Ancestry", filename: Optional[str] = None) -> Digraph:
    """
    Returns a Digraph of the laid out tree. Couples are joined by a double line,
    ex-partners by a dashed one, and a couple's shared children hang from an
    invisible point between the two partners.
    """
    relations = layout.relations
    positions = layout.positions
    tree = Digraph(
        comment=comment,
        filename=filename,
        engine="neato",
        graph_attr={"splines": "ortho"},
        edge_attr={"dir": "none"},
    )

    for member in relations.members:
        position = positions.get(member.id)
        attrs = _member_attrs(member)
        if position is not None:
            attrs["pos"] = _pos(position.x, position.y)
        tree.node(member.id, **attrs)

    hung = set()
    for index, key in enumerate(relations.couples):
        first, second = sorted(relations.couple_members(key), key=lambda mid: positions[mid].x if mid in positions else 0)
        tree.edge(first, second, color="black:invis:black")
        children = relations.shared_children(first, second)
        if not children:
            continue

        point = f"couple{index}"
        point_attrs = dict(_COUPLE_POINT)
        if first in positions and second in positions:
            point_attrs["pos"] = _pos(
                (positions[first].x + positions[second].x) / 2,
                positions[first].y,
            )
        tree.node(point, **point_attrs)
        for child_id in children:
            tree.edge(point, child_id)
            hung.add(child_id)

    drawn_exes = set()
    for member in relations.members:
        ex_partner_id = relations.ex_partner_of(member.id)
        if ex_partner_id is None or frozenset((member.id, ex_partner_id)) in drawn_exes:
            continue
        drawn_exes.add(frozenset((member.id, ex_partner_id)))
        tree.edge(member.id, ex_partner_id, style="dashed")

    for member in relations.members:
        if member.id in hung:
            continue
        for parent_id in relations.parents_of(member.id):
            tree.edge(parent_id, member.id)

    return tree
