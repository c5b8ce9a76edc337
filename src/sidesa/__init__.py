"""Sistem Informasi Desa - village administration backend."""

__version__ = "0.1.0"
