"""Domain layer — keys, models, ids, and the error taxonomy.

This layer depends only on stdlib and pydantic.
It must never import from transform, state, services, or config.
"""
