"""SQLAlchemy Core schema for the catalog tables.

Statements are composed from these tables and compiled to SQLite SQL text;
they are never executed through an ORM session.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, MetaData, String, Table, Text

metadata = MetaData()

games = Table(
    "games",
    metadata,
    Column("id", String, primary_key=True),
    Column("app_id", String, nullable=True),  # Steam app id
    Column("url", String, nullable=True),  # IGDB page
    Column("name", Text, nullable=False),
    Column("icon", String, nullable=True),
    Column("logo", String, nullable=True),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
)

videos = Table(
    "videos",
    metadata,
    Column("id", String, primary_key=True),  # YouTube video id
    Column("title", Text, nullable=False),
    Column("thumbnail", String, nullable=True),
    Column("published_at", DateTime, nullable=False),
    Column("game_id", String, ForeignKey("games.id"), nullable=True),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
)

Index("ix_videos_published_at", videos.c.published_at)
Index("ix_videos_game_id", videos.c.game_id)
Index("ix_games_name", games.c.name)
