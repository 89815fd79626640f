"""
Agents package
"""
