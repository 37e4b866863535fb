"""SQLAlchemy ORM models for loan applications"""

import uuid
from sqlalchemy import Column, BigInteger, Float, DateTime, Integer, Text, JSON, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class LoanApplicationRecord(Base):
    """Loan application wizard state, from first step to submission"""

    __tablename__ = "loan_application"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    offer_id = Column(Text, nullable=False)
    bank = Column(Text, nullable=False)
    interest = Column(Float, nullable=False)
    step = Column(Integer, nullable=False, default=1)
    loan_amount = Column(BigInteger, nullable=True)
    tenure_months = Column(Integer, nullable=True)
    purpose = Column(Text, nullable=False, default="")
    personal_details = Column(JSON, nullable=False, default=dict)
    score_at_application = Column(Integer, nullable=True)
    status = Column(Text, nullable=False, default="draft")  # draft | submitted
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    submitted_at = Column(DateTime(timezone=True), nullable=True)
