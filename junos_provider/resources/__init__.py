"""
Junos resource types

Each module defines a dataclass model and a Resource subclass turning it
into set/delete statements and back. resources.registry maps type names to
their Resource class.
"""
