from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from painel.database import Base, utcnow


class Idea(Base):
    __tablename__ = "ideas"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(30), default="idea", nullable=False)
    category = Column(String(100), nullable=True)
    project_type = Column(String(100), nullable=True)
    brainstorm = Column(Text, nullable=True)
    main_goal = Column(Text, nullable=True)
    target_audience = Column(Text, nullable=True)
    estimated_time = Column(String(100), nullable=True)
    main_risk = Column(Text, nullable=True)
    main_difficulty = Column(Text, nullable=True)
    personal_motivation = Column(Text, nullable=True)
    profit_potential = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    tags = Column(JSON, nullable=True)
    required_resources = Column(JSON, nullable=True)
    checklist = Column(JSON, nullable=True)
    progress = Column(Integer, default=0, nullable=True)
    is_favorite = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Learning(Base):
    __tablename__ = "learnings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, default="", nullable=False)
    category = Column(String(100), default="geral", nullable=False)
    tags = Column(JSON, nullable=True)
    is_favorite = Column(Boolean, default=False, nullable=False)
    linked_project_id = Column(Integer, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)
    linked_idea_id = Column(Integer, ForeignKey("ideas.id", ondelete="SET NULL"), nullable=True)
    date = Column(DateTime, default=utcnow, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class PersonalNote(Base):
    __tablename__ = "personal_notes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, default="", nullable=False)
    tags = Column(JSON, nullable=True)
    is_pinned = Column(Boolean, default=False, nullable=False)
    reminder_date = Column(DateTime, nullable=True)
    linked_project_id = Column(Integer, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)
    linked_idea_id = Column(Integer, ForeignKey("ideas.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class GlobalTask(Base):
    __tablename__ = "global_tasks"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
