"""
Repositories Package - Grant Review Scoring Engine
grant_review/repositories/__init__.py

Store contract and its in-memory and Snowflake implementations.
"""

from grant_review.repositories.base import BaseRepository
from grant_review.repositories.memory_repository import InMemoryScoreRepository
from grant_review.repositories.score_repository import ScoreRepository
from grant_review.repositories.snowflake_score_repository import SnowflakeScoreRepository

__all__ = [
    "BaseRepository",
    "InMemoryScoreRepository",
    "ScoreRepository",
    "SnowflakeScoreRepository",
]
