"""Protojump: jump from generated code to the proto schema that declared it."""

__version__ = "0.3.0"
