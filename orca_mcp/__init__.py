"""
Application package for the Orca AI HUNT MCP server.

Submodules cover configuration resolution, the resilient HTTP client, HUNT
response models and formatting, and the MCP tool registrations.
"""

__all__ = []
