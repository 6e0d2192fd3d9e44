"""Domain layer — entities, rules, and pure transformations.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
