import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from kiwi_counter.core.database import Base
from kiwi_counter.core.time import utc_now


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("green_count >= 0", name="ck_users_green_count"),
        CheckConstraint("yellow_count >= 0", name="ck_users_yellow_count"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    username: Mapped[str] = mapped_column(
        String(64), unique=True, index=True
    )
    password_hash: Mapped[str] = mapped_column(String(255))
    green_count: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0"
    )
    yellow_count: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0"
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now)
