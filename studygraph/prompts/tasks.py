"""Prompts for the document-level tasks sent through the provider router.

Every template takes ``{text}``. JSON braces are doubled for ``str.format``.
"""

EXTRACT_CONCEPTS_PROMPT = """\
Extract the main concepts and knowledge points from the text below.
Answer with JSON only, in this shape:
{{"concepts": [{{"name": "concept name", "description": "one sentence", "importance": 0.8}}]}}

Text:
{text}
"""

EXTRACT_RELATIONS_PROMPT = """\
Analyse how the concepts in the text below relate to each other.
Use one of: related_to, part_of, depends_on, similar_to, opposite_to, example_of, leads_to.
Answer with JSON only, in this shape:
{{"relations": [{{"from": "concept A", "to": "concept B", "relation": "part_of", "strength": 0.7}}]}}

Text:
{text}
"""

GENERATE_QUESTIONS_PROMPT = """\
Write {count} study questions that test understanding of the text below.
Answer with JSON only, in this shape:
{{"questions": [{{"question": "...", "type": "comprehension", "difficulty": "medium"}}]}}

Text:
{text}
"""

SUMMARY_PROMPT = """\
Write a concise summary of the text below in at most {max_length} characters,
in the same language as the text. Answer with the summary only.

Text:
{text}
"""

EXPLAIN_CONCEPT_PROMPT = """\
Explain the concept "{concept}" to a student, using the material below as the
only source. Cover what it is, why it matters and one example if the material
has one. Answer in the language of the material.

Material:
{text}
"""
