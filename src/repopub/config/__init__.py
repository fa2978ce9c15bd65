"""Configuration layer — pydantic models, settings discovery, logging setup."""
