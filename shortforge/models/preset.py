"""
Preset Models
Style and Climate presets. The pipeline only reads them.
"""

from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, Boolean

from shortforge.core.database import Base


class Style(Base):
    """Rhetorical/structural intent: hook type, CTA type, narrator posture."""

    __tablename__ = "styles"

    id = Column(String, primary_key=True)  # style_xxxx format
    user_id = Column(String, nullable=True, index=True)  # None for system presets
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)

    hook_type = Column(String, nullable=True)
    hook_example = Column(Text, nullable=True)
    cta_type = Column(String, nullable=True)
    cta_example = Column(Text, nullable=True)
    script_function = Column(String, nullable=True)
    narrator_posture = Column(String, nullable=True)
    content_complexity = Column(String, nullable=True)
    target_audience = Column(String, nullable=True)

    visual_prompt_base = Column(Text, nullable=True)
    advanced_instructions = Column(Text, nullable=True)

    is_system = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Climate(Base):
    """Emotional/pacing intent: emotional state, revelation dynamic, narrative pressure."""

    __tablename__ = "climates"

    id = Column(String, primary_key=True)  # climate_xxxx format
    user_id = Column(String, nullable=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)

    emotional_state = Column(String, nullable=True)
    revelation_dynamic = Column(String, nullable=True)
    narrative_pressure = Column(String, nullable=True)
    hook_type = Column(String, nullable=True)
    closing_type = Column(String, nullable=True)

    prompt_fragment = Column(Text, nullable=True)
    behavior_preview = Column(Text, nullable=True)

    is_system = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
