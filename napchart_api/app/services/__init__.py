"""
Service layer.

Each service wraps the repositories of one domain and enforces who may
read or change which records.  REST handlers call services only; they
never talk to repositories directly.
"""
