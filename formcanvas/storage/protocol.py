"""Storage protocol for persisted schemas.

Defines the interface that all storage backends must implement.
"""

from typing import Protocol

from formcanvas.schema import FormSchema


class SchemaStorage(Protocol):
    """Protocol defining the storage interface for form schemas.

    Backends store exactly one schema per key. The builder always uses the
    same fixed key, so in practice a backend holds one current schema.
    """

    def save(self, key: str, schema: FormSchema) -> None:
        """Persist a schema under a key, replacing any previous value.

        Args:
            key: Storage key.
            schema: Schema to persist.
        """
        ...

    def load(self, key: str) -> FormSchema | None:
        """Load the schema stored under a key.

        Args:
            key: Storage key.

        Returns:
            The schema, or None if nothing is stored under the key.

        Raises:
            SchemaLoadError: If the stored payload is not a valid schema.
        """
        ...

    def delete(self, key: str) -> bool:
        """Delete the schema stored under a key.

        Returns:
            True if something was deleted, False if the key was empty.
        """
        ...

    def exists(self, key: str) -> bool:
        """Check whether a schema is stored under a key."""
        ...
