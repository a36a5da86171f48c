"""
Character Models
User-owned character roster and its association with shorts.
"""

from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, Integer, ForeignKey
from sqlalchemy.orm import relationship

from shortforge.core.database import Base


class Character(Base):
    """Character profile used to keep narration and visuals consistent."""

    __tablename__ = "characters"

    id = Column(String, primary_key=True)  # char_xxxx format
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    prompt_description = Column(Text, nullable=True)  # canonical visual prompt

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class JobCharacter(Base):
    """Character cast in a short, with role and optional per-short wardrobe."""

    __tablename__ = "short_characters"

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(String, ForeignKey("shorts.id"), nullable=False, index=True)
    character_id = Column(String, ForeignKey("characters.id"), nullable=False)
    order_index = Column(Integer, default=0)
    role = Column(String, nullable=True)
    custom_prompt = Column(Text, nullable=True)
    custom_clothing = Column(String, nullable=True)

    job = relationship("GenerationJob", back_populates="characters")
    character = relationship("Character")
