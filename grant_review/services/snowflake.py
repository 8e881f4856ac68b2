"""
Snowflake Connection Factory - Grant Review Scoring Engine
grant_review/services/snowflake.py

Module-level connection factory used by the Snowflake repositories.
"""

import snowflake.connector

from grant_review.config import settings


def get_snowflake_connection():
    """
    Open a Snowflake connection from Settings.
    Used by repositories via BaseRepository.get_connection().
    """
    password = settings.SNOWFLAKE_PASSWORD.get_secret_value() if settings.SNOWFLAKE_PASSWORD else None

    return snowflake.connector.connect(
        account=settings.SNOWFLAKE_ACCOUNT,
        user=settings.SNOWFLAKE_USER,
        password=password,
        warehouse=settings.SNOWFLAKE_WAREHOUSE,
        database=settings.SNOWFLAKE_DATABASE,
        schema=settings.SNOWFLAKE_SCHEMA,
        role=settings.SNOWFLAKE_ROLE,
    )
