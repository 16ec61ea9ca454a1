"""
Infrastructure Layer

Concrete backends for the core interfaces: actor state stores (in-memory,
Redis) and configuration stores (in-memory, JSON file).
"""
