"""Core building blocks: settings, exceptions and shared schemas."""
