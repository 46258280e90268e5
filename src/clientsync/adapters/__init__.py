"""
Adapters - Implementations of the core ports.

- memory/: in-memory primary store, spreadsheet and project tracker
- audit/: audit sinks
- config/: configuration providers
"""
