"""
Schema health checks.

Heuristics that look for relationships the schema probably should have
and for tables whose shape suggests an integrity problem. Both work on the
same SchemaGraph the layout uses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .graph import SchemaGraph

# Table name fragments that usually belong together
BUSINESS_PATTERNS = (
    ('users', 'employees'),
    ('employees', 'departments'),
    ('departments', 'business_units'),
    ('customers', 'leads'),
    ('leads', 'services'),
    ('services', 'equipment'),
    ('jobs', 'visits'),
    ('visits', 'employees'),
    ('equipment', 'equipment_categories'),
)

TENANT_TABLE = 'business_units'

_SEVERITY_ORDER = {'critical': 3, 'warning': 2, 'info': 1}


@dataclass(frozen=True)
class MissingLink:
    source: str
    target: str
    confidence: float
    reason: str
    impact: str
    suggested_columns: tuple[str, ...] = ()

    @property
    def id(self) -> str:
        return f"missing-{self.source}-{self.target}"


@dataclass(frozen=True)
class IntegrityIssue:
    kind: str
    table: str
    description: str
    severity: str
    record_count: int = 0

    @property
    def id(self) -> str:
        return f"{self.kind}-{self.table}"


def link_confidence(
    name1: str,
    name2: str,
    columns1: tuple[str, ...] = (),
    columns2: tuple[str, ...] = ()
) -> float:
    """
    Score in [0, 1] for how likely two tables should be related.

    Args:
        name1, name2: Table names
        columns1, columns2: Column names of each table, when known
    """
    confidence = 0.0
    if 'business' in name1 or 'business' in name2:
        confidence += 0.3
    for a, b in BUSINESS_PATTERNS:
        if (a in name1 and b in name2) or (b in name1 and a in name2):
            confidence += 0.4
    for c1 in columns1:
        for c2 in columns2:
            if c1 == c2 and 'id' in c1:
                confidence += 0.2
            if c1 == f"{name2}_id" or c2 == f"{name1}_id":
                confidence += 0.3
    return min(confidence, 1.0)


def _reason(name1: str, name2: str) -> str:
    if 'business' in name1 or 'business' in name2:
        return 'Business unit relationship for multi-tenant structure'
    if 'employee' in name1 or 'employee' in name2:
        return 'Employee workflow and organisational structure'
    if 'customer' in name1 or 'lead' in name2:
        return 'Customer journey and sales pipeline'
    return 'Potential operational improvement'


def _suggest_columns(
    name1: str, name2: str, columns1: tuple[str, ...], columns2: tuple[str, ...]
) -> tuple[str, ...]:
    suggestions = [f"{name1}.{c} -> {name2}.id" for c in columns1 if c.endswith("_id")]
    suggestions += [f"{name2}.{c} -> {name1}.id" for c in columns2 if c.endswith("_id")]
    if not suggestions:
        suggestions = [f"Add {name2}_id to {name1}", f"Add {name1}_id to {name2}"]
    return tuple(suggestions)


def _impact(confidence: float) -> str:
    if confidence > 0.8:
        return 'high'
    if confidence > 0.7:
        return 'medium'
    return 'low'


def detect_missing_links(
    graph: SchemaGraph,
    columns: Optional[dict[str, tuple[str, ...]]] = None,
    threshold: float = 0.6
) -> list[MissingLink]:
    """
    Unrelated table pairs that look like they should be related.

    Args:
        graph: Schema graph
        columns: Optional column names per table id
        threshold: Minimum confidence to report

    Returns:
        Findings sorted by confidence, highest first
    """
    columns = columns or {}
    adjacency = graph.adjacency()
    found = []
    for a in graph.nodes:
        for b in graph.nodes:
            if a.id == b.id or b.id in adjacency[a.id]:
                continue
            confidence = link_confidence(a.id, b.id, columns.get(a.id, ()), columns.get(b.id, ()))
            if confidence > threshold:
                found.append(MissingLink(
                    source=a.id,
                    target=b.id,
                    confidence=confidence,
                    reason=_reason(a.id, b.id),
                    impact=_impact(confidence),
                    suggested_columns=_suggest_columns(
                        a.id, b.id, columns.get(a.id, ()), columns.get(b.id, ())
                    ),
                ))
    found.sort(key=lambda m: m.confidence, reverse=True)
    return found


def check_integrity(graph: SchemaGraph) -> list[IntegrityIssue]:
    """
    Shape-based integrity warnings, most severe first.

    - tables holding records but without relationships
    - tables with more than ten times the mean record count
    - tables not linked to the tenant table, when the schema has one
    """
    issues: list[IntegrityIssue] = []
    nodes = graph.nodes
    if not nodes:
        return issues

    for n in nodes:
        if n.relationship_count == 0 and n.record_count > 0:
            issues.append(IntegrityIssue(
                kind='isolated',
                table=n.id,
                description=f"Table '{n.display_name}' has {n.record_count} records but no relationships",
                severity='warning',
                record_count=n.record_count,
            ))

    mean = sum(n.record_count for n in nodes) / len(nodes)
    for n in nodes:
        if n.record_count > mean * 10:
            issues.append(IntegrityIssue(
                kind='large-table',
                table=n.id,
                description=f"Table '{n.display_name}' has an unusually high record count ({n.record_count:,})",
                severity='info',
                record_count=n.record_count,
            ))

    if TENANT_TABLE in graph:
        linked = set(graph.adjacency()[TENANT_TABLE])
        for n in nodes:
            if n.id != TENANT_TABLE and n.id not in linked:
                issues.append(IntegrityIssue(
                    kind='no-business-unit',
                    table=n.id,
                    description=f"Table '{n.display_name}' is not linked to business units",
                    severity='critical',
                    record_count=n.record_count,
                ))

    issues.sort(key=lambda i: _SEVERITY_ORDER[i.severity], reverse=True)
    return issues
