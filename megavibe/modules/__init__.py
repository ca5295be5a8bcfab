"""
MegaVibe Modules

Each module owns one concern behind a small public interface:
- config: settings loaded from the environment
- session: record storage and the create/get/renew/end lifecycle
- middleware: binds the session cookie to the request
- api: HTTP routes and response models

Modules only import each other through their package interfaces.
"""
