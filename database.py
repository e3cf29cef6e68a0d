#!/usr/bin/env python3
"""
Database models and configuration for PlayList.
Handles the SQLite (or any SQLAlchemy URL) store holding the video game library.
"""

import os
import logging
from sqlalchemy import (
    create_engine, Column, Integer, String, Boolean, Date, Float, Text, CheckConstraint,
)
from sqlalchemy.orm import sessionmaker, declarative_base

logger = logging.getLogger('playlist.database')

# Database URL - any SQLAlchemy URL works, SQLite file by default
DATABASE_URL = os.getenv('PLAYLIST_DATABASE_URL', 'sqlite:///playlist.db')

# Stored in the playtime column when no playtime was entered
PLAYTIME_ABSENT = -1

Base = declarative_base()


def make_engine(url: str):
    """Create an engine for *url*; SQLite connections may be shared across threads."""
    connect_args = {"check_same_thread": False} if url.startswith('sqlite') else {}
    return create_engine(url, echo=False, connect_args=connect_args)


def make_session_factory(bind):
    """Build a session factory from an engine or a database URL."""
    if isinstance(bind, str):
        bind = make_engine(bind)
    return sessionmaker(autoflush=False, bind=bind)


engine = make_engine(DATABASE_URL)
SessionLocal = make_session_factory(engine)


class VideoGame(Base):
    """One tracked video game and its four category flags."""
    __tablename__ = "video_games"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(100), nullable=False)
    platform = Column(String(50), nullable=False)
    publisher = Column(String(50), nullable=False)
    release_date = Column(Date, nullable=False)
    completion_date = Column(Date, nullable=True)
    playtime = Column(Integer, nullable=False, default=PLAYTIME_ABSENT)  # hours, -1 when absent
    price = Column(Float, nullable=False, default=0.0)
    is_backlog = Column(Boolean, nullable=False, default=False)
    is_collection = Column(Boolean, nullable=False, default=False)
    is_completion = Column(Boolean, nullable=False, default=False)
    is_wishlist = Column(Boolean, nullable=False, default=False)
    image_path = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint('playtime <= 10000', name='ck_video_games_playtime'),
        CheckConstraint('price >= 0 AND price <= 10000', name='ck_video_games_price'),
        CheckConstraint(
            'is_backlog OR is_collection OR is_completion OR is_wishlist',
            name='ck_video_games_category',
        ),
    )


def init_db(bind=None):
    """Initialize database tables."""
    try:
        Base.metadata.create_all(bind=bind or engine)
        logger.info("Database tables initialized successfully")
        return True
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        return False
