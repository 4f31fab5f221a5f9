from sqlalchemy import Column, String, Integer, ForeignKey
from sqlalchemy.dialects.postgresql import TIMESTAMP, JSONB, UUID
from sqlalchemy.sql import func
import uuid
from ..database import Base


class GameRecord(Base):
    """A game created through the API."""
    __tablename__ = "games"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Configuration
    seed = Column(String(128), nullable=False)
    difficulty = Column(String(20), default="normal")
    team_ids = Column(JSONB, default=list)
    profile = Column(JSONB, default=dict)  # validated GameProfile dump

    # State
    current_round = Column(Integer, default=0)
    max_rounds = Column(Integer, default=12)
    status = Column(String(20), default="created")  # 'created', 'running', 'finished'

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())


class RoundSnapshot(Base):
    """One settled round: world, team states and the audit trail."""
    __tablename__ = "round_snapshots"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    game_id = Column(UUID(as_uuid=True), ForeignKey("games.id"), index=True)
    round_number = Column(Integer, nullable=False)

    world = Column(JSONB)
    teams = Column(JSONB)
    results = Column(JSONB)
    rankings = Column(JSONB)
    achievements = Column(JSONB, default=dict)
    audit = Column(JSONB, default=dict)  # seeds and state hashes

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
