# relaydrop/models/kv_entry.py

from sqlalchemy import Column, String, Text, DateTime
from relaydrop.models.base import Base
from datetime import datetime

class KVEntry(Base):
    __tablename__ = "relay_entries"

    # "msg:<token>" for pending envelopes, "code:<SHORTCODE>" for aliases
    key = Column(String(160), primary_key=True)
    value = Column(Text, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
