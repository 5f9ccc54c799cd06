"""Versioned contracts shared by the platform and web layers."""
