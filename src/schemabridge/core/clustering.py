"""
Domain clustering of validation objects.

Objects that reference each other (directly or through wrappers) end up in
the same group; groups are named after the word their members share. Used
only to organize modular output files.
"""

from __future__ import annotations

import logging
from collections import Counter, deque
from dataclasses import dataclass, field

from . import ir
from .strings import capitalize, pluralize, tokenize

logger = logging.getLogger(__name__)

COMMON_GROUP = "common"


@dataclass
class DomainAssignment:
    """Explicit members of one configured domain."""

    objects: list[str] = field(default_factory=list)
    enums: list[str] = field(default_factory=list)


@dataclass
class DomainConfig:
    """Configured ``domain -> members`` assignments, applied before clustering."""

    domains: dict[str, DomainAssignment] = field(default_factory=dict)


@dataclass
class DomainGroup:
    """
    A named group of objects and enums.

    Attributes:
        name: Lowercase group name (used for file names)
        display_name: Title-cased name
        objects: Member object names, sorted
        enums: Member enum names, sorted
    """

    name: str
    display_name: str
    objects: list[str] = field(default_factory=list)
    enums: list[str] = field(default_factory=list)


def _references(vtype: ir.ValidationType, kind: type) -> list[str]:
    """Names of ``kind`` references reachable through wrappers and unions."""
    leaf = ir.unwrap(vtype)
    if isinstance(leaf, kind):
        return [leaf.name]
    if isinstance(leaf, ir.UnionType):
        return [name for option in leaf.options for name in _references(option, kind)]
    return []


def build_reference_graph(schema: ir.ValidationSchema) -> dict[str, list[str]]:
    """Directed graph of object -> referenced objects, limited to known objects."""
    graph: dict[str, list[str]] = {}
    for obj in schema.objects.values():
        targets: list[str] = []
        for obj_field in obj.fields:
            for name in _references(obj_field.type, ir.ObjectRef):
                if name in schema.objects and name not in targets:
                    targets.append(name)
        graph[obj.name] = targets
    return graph


def connected_components(names: list[str], graph: dict[str, list[str]]) -> list[list[str]]:
    """Undirected connected components among ``names``, in discovery order."""
    allowed = set(names)
    neighbours: dict[str, list[str]] = {name: [] for name in names}
    for source, targets in graph.items():
        for target in targets:
            if source in allowed and target in allowed:
                neighbours[source].append(target)
                neighbours[target].append(source)

    visited: set[str] = set()
    components: list[list[str]] = []
    for start in names:
        if start in visited:
            continue
        component: list[str] = []
        queue = deque([start])
        visited.add(start)
        while queue:
            current = queue.popleft()
            component.append(current)
            for neighbour in neighbours[current]:
                if neighbour not in visited:
                    visited.add(neighbour)
                    queue.append(neighbour)
        components.append(component)
    return components


def infer_domain_name(members: list[str]) -> str:
    """
    Name a cluster.

    The most frequent token shared by at least two members wins (ties go to
    the token seen first); otherwise the first member's pluralized name.

    Examples:
        >>> infer_domain_name(["Order", "OrderItem", "Product"])
        'order'
        >>> infer_domain_name(["User"])
        'users'
    """
    counts: Counter[str] = Counter()
    for member in members:
        counts.update(list(dict.fromkeys(tokenize(member))))
    shared = [(token, n) for token, n in counts.items() if n >= 2]
    if shared:
        # max() keeps the first of equal counts, in first-seen order
        return max(shared, key=lambda item: item[1])[0]
    return pluralize(members[0].lower())


def group_by_domain(
    schema: ir.ValidationSchema, config: DomainConfig | None = None
) -> list[DomainGroup]:
    """
    Partition objects and enums into domain groups.

    Configured assignments are applied first. Remaining objects are clustered
    by their reference graph. Each remaining enum joins the group of the first
    object that uses it, or the ``common`` group if none does.

    Returns:
        Groups sorted by name, members sorted within each group
    """
    groups: dict[str, tuple[set[str], set[str]]] = {}
    assigned_objects: set[str] = set()
    assigned_enums: set[str] = set()

    def group(name: str) -> tuple[set[str], set[str]]:
        return groups.setdefault(name.lower(), (set(), set()))

    if config is not None:
        for domain, members in config.domains.items():
            objects, enums = group(domain)
            for name in members.objects:
                if name not in assigned_objects:
                    objects.add(name)
                    assigned_objects.add(name)
            for name in members.enums:
                if name not in assigned_enums:
                    enums.add(name)
                    assigned_enums.add(name)

    remaining = [name for name in schema.objects if name not in assigned_objects]
    for component in connected_components(remaining, build_reference_graph(schema)):
        objects, _ = group(infer_domain_name(component))
        objects.update(component)
        assigned_objects.update(component)

    object_group = {obj: name for name, (objects, _) in groups.items() for obj in objects}
    for enum_name in schema.enums:
        if enum_name in assigned_enums:
            continue
        user = next(
            (
                obj.name
                for obj in schema.objects.values()
                if any(enum_name in _references(f.type, ir.EnumTypeRef) for f in obj.fields)
            ),
            None,
        )
        target = object_group.get(user, COMMON_GROUP) if user else COMMON_GROUP
        group(target)[1].add(enum_name)
        assigned_enums.add(enum_name)

    result = [
        DomainGroup(
            name=name,
            display_name=capitalize(name),
            objects=sorted(objects),
            enums=sorted(enums),
        )
        for name, (objects, enums) in groups.items()
    ]
    result.sort(key=lambda g: g.name)
    logger.debug(f"Clustered {len(schema.objects)} objects into {len(result)} group(s)")
    return result
