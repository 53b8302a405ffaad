"""
Cross-cutting infrastructure: configuration, logging, database access,
security, paging and the domain error types.
"""
