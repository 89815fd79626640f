"""
Chatter assistant core - agent orchestration graph for conversational requests
"""

__version__ = "0.1.0"
