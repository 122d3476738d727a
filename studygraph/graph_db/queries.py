"""Parameterized Cypher for concept graphs scoped by document and user."""

MERGE_CONCEPTS = """
UNWIND $nodes AS node
MERGE (c:Concept {document_id: $document_id, id: node.id})
SET c.label = node.label,
    c.type = node.type,
    c.importance = node.importance,
    c.description = node.description,
    c.user_id = $user_id,
    c.last_updated = datetime()
RETURN count(c) AS merged
"""

# Relation type is a property, not a relationship type, so no dynamic Cypher is needed.
MERGE_RELATIONS = """
UNWIND $edges AS edge
MATCH (a:Concept {document_id: $document_id, id: edge.source})
MATCH (b:Concept {document_id: $document_id, id: edge.target})
MERGE (a)-[r:RELATES_TO {type: edge.type}]->(b)
SET r.weight = edge.weight,
    r.label = edge.label,
    r.edge_id = edge.id
RETURN count(r) AS merged
"""

DELETE_DOCUMENT_GRAPH = """
MATCH (c:Concept {document_id: $document_id})
DETACH DELETE c
"""

CONCEPT_NEIGHBOURS = """
MATCH (c:Concept {user_id: $user_id})-[r:RELATES_TO]-(other:Concept)
WHERE toLower(c.label) = toLower($label)
RETURN other.label AS label, r.type AS type, r.weight AS weight, other.document_id AS document_id
ORDER BY r.weight DESC
LIMIT $limit
"""
