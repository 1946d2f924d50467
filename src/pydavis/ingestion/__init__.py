"""Ingestion helpers.

Translate decoded HTTP conditions and UDP broadcasts into report patches.
Only the state store applies them.
"""
