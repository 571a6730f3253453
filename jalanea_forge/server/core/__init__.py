"""Server core: settings, constants and request authentication."""
