"""Configuration layer — TOML sections, settings and logging setup."""
