"""Shared AWS client and credential helpers."""
