"""
Tracing and logging setup for the civic complaints API.
"""
