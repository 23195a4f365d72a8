from sqlalchemy import Column, Integer, String, Boolean, Text, TIMESTAMP, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.permissions import Role
from ..database import Base


class User(Base):
    __tablename__ = "users"

    # Primary Key
    id = Column(Integer, primary_key=True, index=True)

    # Authentication
    username = Column(String(30), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    # Role & Authorization
    role = Column(
        SQLEnum(Role, name="user_role", values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=Role.USER,
        index=True,
    )

    # Profile
    first_name = Column(String(50))
    last_name = Column(String(50))
    bio = Column(Text)
    avatar = Column(String(500))

    # Account Status
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    last_login = Column(TIMESTAMP, nullable=True)

    # Timestamps
    created_at = Column(TIMESTAMP, server_default=func.now(), index=True)
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    # Relationships
    posts = relationship("Post", back_populates="author", foreign_keys="Post.author_id")

    PROFILE_FIELDS = ("first_name", "last_name", "bio", "avatar")

    @property
    def profile(self) -> dict:
        return {name: getattr(self, name) for name in self.PROFILE_FIELDS}

    def apply_profile(self, profile: dict) -> None:
        """Merge profile fields into the user, leaving omitted fields untouched."""
        for name, value in profile.items():
            if name in self.PROFILE_FIELDS:
                setattr(self, name, value)

    def __repr__(self):
        return f"<User {self.username} ({self.role})>"
