"""
MegaVibe Sessions - Session lifecycle service for the MegaVibe marketplace

Keeps short-lived server-side state for the tipping and payment flows and
hands clients an opaque cookie.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- config: Environment-driven configuration
- session: Session storage and lifecycle management
- middleware: Cookie <-> session adapter for FastAPI
- api: Response models and HTTP routes
"""

__version__ = "1.0.0"
