"""
URLs Module - Black Box Interface

Purpose: Make platform download URLs safe to embed in a shell command
Interface: normalize_download_url()
"""

from .normalizer import normalize_download_url

__all__ = ["normalize_download_url"]
