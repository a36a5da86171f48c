"""
Admin Settings Model
Singleton row with runtime-editable default models.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, JSON

from shortforge.core.database import Base

SINGLETON_ID = "singleton"


class AdminSetting(Base):
    __tablename__ = "admin_settings"

    id = Column(String, primary_key=True, default=SINGLETON_ID)
    default_models = Column(JSON, default=dict)  # feature key -> "provider:modelId"
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
