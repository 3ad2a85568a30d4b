from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from core.models import Base


def create_session_factory(db_url):
    engine = create_engine(db_url)
    init_db(engine)
    return sessionmaker(bind=engine)


def init_db(engine):
    Base.metadata.create_all(bind=engine)
