"""
HTTP layer of the NapChart API.

Routes are grouped by API version; ``v1`` exposes a single ``router``
that the application mounts under ``settings.api_prefix``.
"""
