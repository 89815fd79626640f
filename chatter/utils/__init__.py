"""
Utilities - logging and error types
"""
