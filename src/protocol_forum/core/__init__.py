"""Core configuration, errors and identity helpers."""
