"""
Base model class for all SQLAlchemy models in the vet-access package.

The BaseModel class follows SQLAlchemy 2.0 patterns with:
- UUID primary keys (native UUID on PostgreSQL, CHAR(32) elsewhere)
- Timestamp and actor audit fields
- Soft delete, so pets and medical records keep their history

Example:
    >>> class MyModel(BaseModel):
    ...     __tablename__ = "my_table"
    ...     name: Mapped[str] = mapped_column(String(100))

    >>> instance = MyModel(name="Test")
    >>> instance.soft_delete()
    >>> instance.is_deleted
    True
"""

import enum
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import Boolean, DateTime, Enum, Uuid, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func

from ..utils.datetime_utils import get_current_utc


class Base(DeclarativeBase):
    """
    Base declarative class for all SQLAlchemy models.

    Attributes:
        type_annotation_map: Maps Python types to SQLAlchemy column types
    """

    type_annotation_map = {
        uuid.UUID: Uuid(as_uuid=True),
    }


class BaseModel(Base):
    """
    Abstract base model class providing common functionality for all entities.

    Attributes:
        id (UUID): Primary key, automatically generated UUID4
        created_at (datetime): Timestamp when record was created (UTC)
        updated_at (datetime): Timestamp when record was last updated (UTC)
        created_by (UUID, optional): ID of user who created the record
        updated_by (UUID, optional): ID of user who last updated the record
        deleted_at (datetime, optional): Timestamp when record was soft deleted
        is_deleted (bool): Flag indicating if record is soft deleted (default: False)

    Note:
        This is an abstract base class and cannot be instantiated directly.
        All concrete models must define a __tablename__ attribute.
    """

    __abstract__ = True

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # Client-side defaults keep the values readable after flush without a
    # refresh round-trip (lazy loads are not available under asyncio).
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=get_current_utc,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=get_current_utc,
        server_default=func.now(),
        onupdate=get_current_utc,
    )

    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
    )

    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
    )

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    is_deleted: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    def __repr__(self) -> str:
        """Return string representation in format: <ModelName(id=uuid)>."""
        return f"<{self.__class__.__name__}(id={self.id})>"

    def to_dict(self, exclude_deleted: bool = True) -> Dict[str, Any]:
        """
        Convert model instance to dictionary representation.

        Converts datetimes to ISO strings, UUIDs to strings and enums to
        their values.

        Args:
            exclude_deleted: If True, returns empty dict for soft-deleted records.

        Returns:
            Dictionary with column names as keys and serialized values.
        """
        if exclude_deleted and self.is_deleted:
            return {}

        result = {}
        for column in self.__table__.columns:
            value = getattr(self, column.key)
            if isinstance(value, datetime):
                result[column.key] = value.isoformat()
            elif isinstance(value, uuid.UUID):
                result[column.key] = str(value)
            elif isinstance(value, enum.Enum):
                result[column.key] = value.value
            else:
                result[column.key] = value
        return result

    def soft_delete(self, deleted_by: Optional[uuid.UUID] = None) -> None:
        """
        Mark the record as deleted without removing it from the database.

        Args:
            deleted_by: UUID of the user performing the deletion. If provided,
                       also updates the updated_by field for audit purposes.

        Note:
            This method only modifies the instance. You must commit the
            transaction to persist changes to the database.
        """
        self.is_deleted = True
        self.deleted_at = get_current_utc()
        if deleted_by:
            self.updated_by = deleted_by

    @classmethod
    def get_table_name(cls) -> str:
        """Get the database table name for this model."""
        return cls.__tablename__

    @classmethod
    def create_query_filter_active(cls):
        """
        Create a SQLAlchemy filter expression for active (non-deleted) records.

        Example:
            >>> stmt = select(Pet).where(Pet.create_query_filter_active())
        """
        return cls.is_deleted.is_(False)

    def update_fields(self, **kwargs) -> None:
        """
        Update multiple fields on the model instance in a single operation.

        Raises:
            AttributeError: If any field name doesn't exist on the model.
        """
        for field, value in kwargs.items():
            if hasattr(self, field):
                setattr(self, field, value)
            else:
                raise AttributeError(
                    f"'{self.__class__.__name__}' has no attribute '{field}'"
                )


def enum_type(enum_cls: type, name: Optional[str] = None) -> Enum:
    """Build an Enum column type that stores member values rather than names."""
    return Enum(
        enum_cls,
        name=name or enum_cls.__name__.lower(),
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )
