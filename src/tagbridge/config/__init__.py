"""
Summary: Configuration loading and derived settings.
Why: Keep TOML parsing and path policy in one place for every layer.
"""
