# src/client/__init__.py — v1
