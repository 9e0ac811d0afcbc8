"""
Top‑level package for the Lofi API.

The HTTP application lives in ``lofi_api.app``; the command line
entrypoint is ``lofi_api.cli`` and a small Python client for the HTTP
surface is available in ``lofi_api.client``.
"""

__all__ = []
