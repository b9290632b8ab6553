"""
Zendesk MCP Server.

This package exposes read-only Zendesk Support and Help Center queries
as tools over the Model Context Protocol.
"""

__version__ = "1.0.0"
__author__ = "Support Tooling"
