"""Sparse text ingestion.

This package decodes ``index:value`` tokens and loads libsvm-format
datasets into frozen feature arenas.
"""
