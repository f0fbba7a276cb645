"""
Boundary layer for external system integrations.

Handles all interactions with external systems (database, image providers,
language model, asset storage). Provides adapters and clients for
infrastructure dependencies.
"""
