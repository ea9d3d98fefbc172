from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from user_service.database.base import Base


class User(Base):
    """
    SQLAlchemy model for User.

    The only persisted entity of the service. Username and email uniqueness is
    enforced by the table's unique constraints; the application never pre-checks it.
    """
    __tablename__ = "user_profile"

    # Server-assigned identifier. BIGINT identity on Postgres; plain INTEGER on SQLite
    # so the column aliases ROWID and autoincrements there as well.
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )

    username: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False
    )

    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False
    )

    # Stored exactly as received. No hashing happens anywhere in this service.
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        # password deliberately left out
        return f"<User(id={self.id!r}, username={self.username!r}, email={self.email!r})>"
