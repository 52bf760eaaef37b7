"""Launcher core components.

- Settings loaded from .env
- Structured logging
- Process execution with streamed output
- Project workflows and the session that serializes them
"""
