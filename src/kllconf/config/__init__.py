"""Configuration layer — settings models, env overrides, and logging setup."""
