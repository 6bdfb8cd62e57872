"""ORM models. Importing this package registers every table on Base.metadata."""

from neuronotes.models.note import Note
from neuronotes.models.user import User

__all__ = ["Note", "User"]
