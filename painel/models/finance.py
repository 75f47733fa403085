from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, UniqueConstraint
from sqlalchemy.orm import relationship

from painel.database import Base, utcnow


class Investment(Base):
    __tablename__ = "investments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    date = Column(DateTime, nullable=False, index=True)  # UTC
    created_at = Column(DateTime, default=utcnow, nullable=False)

    project = relationship("Project", back_populates="investments")


class Revenue(Base):
    __tablename__ = "revenues"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    gross_amount = Column(Numeric(14, 2), nullable=False)
    gateway_percentage = Column(Numeric(5, 2), default=0, nullable=False)
    gateway_fixed_fee = Column(Numeric(14, 2), default=0, nullable=False)
    net_amount = Column(Numeric(14, 2), nullable=False)
    date = Column(DateTime, nullable=False, index=True)  # UTC
    created_at = Column(DateTime, default=utcnow, nullable=False)

    project = relationship("Project", back_populates="revenues")


class FinancialHistory(Base):
    __tablename__ = "project_financial_history"
    __table_args__ = (UniqueConstraint("project_id", "date", name="uq_financial_history_project_date"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)  # dia no fuso de negócio
    investment_amount = Column(Numeric(14, 2), default=0, nullable=False)
    revenue_amount = Column(Numeric(14, 2), default=0, nullable=False)
    net_profit = Column(Numeric(14, 2), default=0, nullable=False)
    roi = Column(Numeric(14, 2), default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    project = relationship("Project", back_populates="history")
