"""Case-insensitive, read-only request headers."""

from collections.abc import Iterator, Mapping

from roost._internal.asgi import RawHeaders


class Headers(Mapping[str, str]):
    """Request headers keyed by lower-cased name.

    Built from the raw ``(name, value)`` byte pairs of an ASGI scope.
    Lookup returns the first value sent under a name; ``get_list``
    returns every value in arrival order.
    """

    __slots__ = ("_index", "_raw")

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] | RawHeaders = ()) -> None:
        pairs = tuple(raw)
        index: dict[str, list[str]] = {}
        for name, value in pairs:
            index.setdefault(name.decode("latin-1").lower(), []).append(value.decode("latin-1"))
        object.__setattr__(self, "_raw", pairs)
        object.__setattr__(self, "_index", index)

    @classmethod
    def from_mapping(cls, headers: Mapping[str, str]) -> "Headers":
        """Encode a ``{name: value}`` mapping into headers."""
        return cls(
            tuple((name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in headers.items())
        )

    def __getitem__(self, key: str) -> str:
        return self._index[key.lower()][0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"Headers({dict(self)!r})"

    def get_list(self, key: str) -> list[str]:
        return list(self._index.get(key.lower(), ()))

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """The byte pairs as received."""
        return self._raw
