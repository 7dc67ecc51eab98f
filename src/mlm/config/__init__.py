"""Configuration — settings sources, config discovery, logging setup."""
