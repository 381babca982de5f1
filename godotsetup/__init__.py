"""
godotsetup - Install Godot Engine builds on CI runners.

Resolves Godot release artifacts (engine archives and export templates) for
a semantic version and host platform, installs them with caching, and
exposes the executable to later CI steps.
"""

__version__ = "0.1.0"
