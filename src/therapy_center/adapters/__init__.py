# src/therapy_center/adapters/__init__.py
"""
Adapters package - concrete implementations of port interfaces.

- store/memory.py - in-memory document store
- store/sqlite.py - SQLite document store (JSON documents)
- store/supabase.py - Supabase document store (jsonb documents)
"""
