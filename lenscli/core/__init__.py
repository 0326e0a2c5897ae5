"""
Core Infrastructure.

Configuration, logging and the error taxonomy shared by the API client
and the command tree.
"""
