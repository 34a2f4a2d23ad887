"""Core models, configuration, errors and logging shared by every layer."""
