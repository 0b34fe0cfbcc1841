"""Service layer — link extraction, caching, traversal, and the navigator facade.

Services may import from domain, infrastructure and plugins.
They must never import from commands or output.
"""
