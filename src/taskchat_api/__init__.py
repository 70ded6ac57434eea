"""
Task & Chat backend package.

Exposes the application factory; ``taskchat_api.main.run`` serves it.
"""

from .main import create_app  # noqa: F401
