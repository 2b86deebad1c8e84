"""
Unit tests for the placeholder engine (src/docfill/placeholders/).

Test suites:
- test_canonical: Key canonicalization and display-form preference
- test_tokenizer: Occurrence scanning and placeholder grammar
- test_conditionals: Block pairing, option groups, dependencies and rendering
- test_registry: Case merging, deduplication and ordering
- test_substitution: Type-aware formatting and replacement
"""
