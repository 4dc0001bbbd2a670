"""Search indexing and query engine package.

This package provides the in-memory search stack:
- analyzers: Tokenizer and lowercase filter
- trie: Prefix-searchable term index holding postings
- query: Query variants and their evaluation
- phrase: Positional chain matching for phrases
- scoring: Length-normalized relevance
- highlight: Span merging, highlighting, and snippets
- index: The document index facade
"""
