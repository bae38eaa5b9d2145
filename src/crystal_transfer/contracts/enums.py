"""Status codes and kinds used across subsystem boundaries.

StorageMethod is stored in the database as free text (trace.method).
Parsing is strict: an unrecognized string is an error, never a default.
"""

from enum import StrEnum

from crystal_transfer.contracts.errors import UnknownStorageMethod


class StorageMethod(StrEnum):
    """Kind of storage mutation recorded by a trace.

    Stored in database (trace.method). The canonical string of each
    member is identical to its name.
    """

    Put = "Put"
    ChildPut = "ChildPut"
    ChildKill = "ChildKill"
    ClearPrefix = "ClearPrefix"
    ChildClearPrefix = "ChildClearPrefix"
    Append = "Append"
    Genesis = "Genesis"

    @classmethod
    def parse(cls, value: str) -> "StorageMethod":
        """Parse a canonical method name.

        Exact, case-sensitive match. "put" and "0" are both rejected.

        Raises:
            UnknownStorageMethod: If value is not one of the canonical names
        """
        try:
            return cls._value2member_map_[value]  # type: ignore[return-value]
        except (KeyError, TypeError):
            raise UnknownStorageMethod(value) from None

    @classmethod
    def names(cls) -> list[str]:
        """All canonical names, in declaration order."""
        return [member.value for member in cls]


def parse_storage_method(value: str) -> StorageMethod:
    """Module-level alias for StorageMethod.parse()."""
    return StorageMethod.parse(value)


def format_storage_method(method: StorageMethod) -> str:
    """Render a method as its canonical string. Total."""
    return method.value
