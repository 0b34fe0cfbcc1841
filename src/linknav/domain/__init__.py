"""Domain layer — document types, link syntax, tags, errors.

This layer depends only on stdlib and ruamel.yaml.
It must never import from services, infrastructure, commands, or config.
"""
