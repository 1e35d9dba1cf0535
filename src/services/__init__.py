# src/services/__init__.py — v1
