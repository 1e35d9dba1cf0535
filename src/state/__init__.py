# src/state/__init__.py — v1
