"""
Generation Job Models
Database models for shorts (generation jobs) and their scenes.
"""

from datetime import datetime
from sqlalchemy import (
    Column, String, Text, DateTime, Integer, Float, Boolean, ForeignKey, JSON, UniqueConstraint
)
from sqlalchemy.orm import relationship

from shortforge.core.database import Base


class JobStatus:
    """Generation job status constants."""
    DRAFT = "DRAFT"
    SCRIPTING = "SCRIPTING"
    PROMPTING = "PROMPTING"
    GENERATING = "GENERATING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    RUNNING = (SCRIPTING, PROMPTING, GENERATING)
    STARTABLE = (DRAFT, FAILED)
    ALL = (DRAFT, SCRIPTING, PROMPTING, GENERATING, COMPLETED, FAILED)


class GenerationJob(Base):
    """
    A short: one end-to-end request to produce narrated, illustrated scenes.

    Only the pipeline orchestrator changes ``status``.
    """

    __tablename__ = "shorts"

    id = Column(String, primary_key=True)  # short_xxxx format
    user_id = Column(String, nullable=False, index=True)

    # Request
    premise = Column(Text, nullable=False)
    target_duration = Column(Integer, default=30)
    format = Column(String, default="SHORT")
    style_id = Column(String, ForeignKey("styles.id"), nullable=True)
    climate_id = Column(String, ForeignKey("climates.id"), nullable=True)
    ai_model = Column(String, nullable=True)  # "provider:modelId" override

    # Manual overrides for the scene calculator
    scene_count_override = Column(Integer, nullable=True)
    scene_duration_override = Column(Float, nullable=True)

    # Status
    status = Column(String, default=JobStatus.DRAFT, index=True)
    progress = Column(Integer, default=0)
    error_message = Column(Text, nullable=True)

    # Script result (stored verbatim)
    title = Column(String, nullable=True)
    hook = Column(Text, nullable=True)
    cta = Column(Text, nullable=True)
    script = Column(JSON, nullable=True)

    credits_used = Column(Integer, default=0)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)

    # Relationships
    style = relationship("Style")
    climate = relationship("Climate")
    scenes = relationship(
        "Scene",
        back_populates="job",
        cascade="all, delete-orphan",
        order_by="Scene.order",
    )
    characters = relationship(
        "JobCharacter",
        back_populates="job",
        cascade="all, delete-orphan",
        order_by="JobCharacter.order_index",
    )

    @property
    def is_running(self) -> bool:
        return self.status in JobStatus.RUNNING

    def __repr__(self):
        return f"<GenerationJob {self.id} ({self.status} {self.progress}%)>"


class Scene(Base):
    """
    One ordered unit of narration + visual prompt + generated image.

    ``order`` is assigned once when the script is parsed and never changes.
    """

    __tablename__ = "scenes"
    __table_args__ = (UniqueConstraint("job_id", "order", name="uq_scene_job_order"),)

    id = Column(String, primary_key=True)  # scene_xxxx format
    job_id = Column(String, ForeignKey("shorts.id"), nullable=False, index=True)

    order = Column(Integer, nullable=False)
    duration = Column(Float, default=5)
    narration = Column(Text, default="")
    visual_desc = Column(Text, default="")
    goal = Column(String, nullable=True)

    # Set by the prompt stage
    image_prompt = Column(Text, nullable=True)
    negative_prompt = Column(Text, nullable=True)

    # Set by the media stage
    media_url = Column(String, nullable=True)
    media_width = Column(Integer, nullable=True)
    media_height = Column(Integer, nullable=True)
    is_generated = Column(Boolean, default=False)
    error_message = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    job = relationship("GenerationJob", back_populates="scenes")

    def __repr__(self):
        return f"<Scene {self.job_id}#{self.order} generated={self.is_generated}>"
