# db/models.py
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, JSON, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def generate_uuid():
    return str(uuid.uuid4())


class RuleSet(Base):
    __tablename__ = "rule_sets"

    id = Column(String, primary_key=True, default=generate_uuid)
    name = Column(String, unique=True, nullable=False)
    description = Column(String)
    version = Column(String, default="1.0.0")
    # ordered list of rule documents, replaced as a whole on every save
    rules = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


def create_tables(database_url, **engine_kwargs):
    engine = create_engine(database_url, **engine_kwargs)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
