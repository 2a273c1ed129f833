"""
Logging utilities for the Tool Finder backend.

Log-safe helpers. Modules log through logging.getLogger(__name__); handlers
and levels are configured once by logging.basicConfig in toolfinder.main.

CRITICAL SECURITY RULES:
- NEVER log passwords or password hashes
- NEVER log session tokens or cookie values
- NEVER log Gemini API keys (user-supplied or stored)
- NEVER log full use-case text (truncate to a short preview)

Acceptable logging:
- High-level events (e.g., "User registered", "Gemini call completed")
- Non-sensitive metadata (e.g., user_id, search_id, prompt fingerprint)
- Error codes and sanitized error messages
"""

from typing import Optional


def preview(text: Optional[str], length: int = 50) -> str:
    """Return a short, log-safe preview of free text."""
    if not text:
        return ""
    return text[:length] + ("..." if len(text) > length else "")
