"""Rope-pulling timing game rules, with scene, chunk, PNG and orbit-camera utilities."""

__version__ = "0.1.0"