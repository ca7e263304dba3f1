"""
Licenses module - License records, activation and offline sync.

This module handles:
- License entity and its lifecycle state machine
- Hardware binding and revision-based sync
- Optimistic (compare-and-swap) writes against the license store
- Usage log (audit) entries
"""
