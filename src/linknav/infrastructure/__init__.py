"""Infrastructure layer — vault store, filesystem, link graph engine.

This layer depends on stdlib, the domain layer and third-party libs
(NetworkX, ruamel.yaml). It must never import from services, commands,
or output.
"""
