from sqlalchemy import Column, Integer, String

from .database import Base


class User(Base):
    """The only persisted entity.

    ``sqlite_autoincrement`` keeps SQLite from handing out the id of a deleted
    row again; PostgreSQL sequences never reuse values anyway.
    """

    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"
