"""
Database package — centralised connection handlers.
"""

from .neo4j_handler import Neo4jHandler

__all__ = ["Neo4jHandler"]
