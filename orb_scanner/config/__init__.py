"""
Configuration module.

Frozen dataclass defaults merged with YAML overrides from config/instruments.yaml.
"""
