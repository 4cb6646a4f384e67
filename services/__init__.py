"""
Services package for Face Expression Tracker.

This package contains the shared, thread-safe pieces that sit between the
detection thread and its readers:
- Expression state store: single-slot, last-write-wins publish target
"""
