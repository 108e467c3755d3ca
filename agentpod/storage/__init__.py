"""
AgentPod Storage Module

Pluggable key-value persistence for the protocol stores.
"""

from .kv import KeyValueStore, MemoryStore, SQLiteStore

__all__ = ["KeyValueStore", "MemoryStore", "SQLiteStore"]
