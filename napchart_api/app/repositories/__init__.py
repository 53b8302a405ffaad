"""
Data access layer.

Repositories are thin wrappers around SQL statements.  They know
nothing about principals or roles; access control lives in the
services that call them.
"""
