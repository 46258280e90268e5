"""
Core layer - domain model, ports, exceptions and the Result type.

Nothing in core performs I/O; adapters implement the ports.
"""
