"""
Jalanea Forge Server Package.

This package contains the web server of Jalanea Forge.

Subpackages:
    api: FastAPI route definitions, one module per resource.
    core: Settings, constants and token verification.
    exception_handlers: Mapping of domain errors to HTTP responses.
    middleware: Request timing and monitoring.
    services: Dependency wiring and response helpers.
"""
