"""
I/O models for API requests and responses.

One module per API area; domain types they embed live in
``jalanea_forge.core.models.domain``.
"""
