from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from db.models import Base


def init_db(database_url: str, *, echo: bool = False) -> sessionmaker[Session]:
    url = make_url(database_url)
    connect_args: dict[str, object] = {}
    if url.get_backend_name() == "sqlite":
        # Sessions are opened from API worker threads and background runs.
        connect_args["check_same_thread"] = False
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine: Engine = create_engine(url, echo=echo, connect_args=connect_args)

    Base.metadata.create_all(engine)
    return sessionmaker(engine)
