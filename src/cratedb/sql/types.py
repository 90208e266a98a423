from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Union

import logging

logger = logging.getLogger(__name__)

ColumnKey = Union[int, str]

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1
_U64_MAX = 2**64 - 1


class SSLOptions:
    # Filled from the _tls_* connection kwargs, see utils.build_client_context
    tls_verify: bool
    tls_verify_hostname: bool
    tls_trusted_ca_file: Optional[str]
    tls_client_cert_file: Optional[str]
    tls_client_cert_key_file: Optional[str]
    tls_client_cert_key_password: Optional[str]

    def __init__(
        self,
        tls_verify: bool = True,
        tls_verify_hostname: bool = True,
        tls_trusted_ca_file: Optional[str] = None,
        tls_client_cert_file: Optional[str] = None,
        tls_client_cert_key_file: Optional[str] = None,
        tls_client_cert_key_password: Optional[str] = None,
    ):
        self.tls_verify = tls_verify
        self.tls_verify_hostname = tls_verify_hostname
        self.tls_trusted_ca_file = tls_trusted_ca_file
        self.tls_client_cert_file = tls_client_cert_file
        self.tls_client_cert_key_file = tls_client_cert_key_file
        self.tls_client_cert_key_password = tls_client_cert_key_password


@dataclass(frozen=True)
class BlobRef:
    """A reference to a server-side blob: the SHA-1 digest of its content and the
    blob table ("bucket") it lives in."""

    digest: bytes
    bucket: str

    @property
    def hex_digest(self) -> str:
        return self.digest.hex()

    def __repr__(self):
        return f"BlobRef(bucket={self.bucket!r}, digest={self.hex_digest})"


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool):
        if _I64_MIN <= value <= _I64_MAX:
            return value
    return None


def _as_unsigned(value: Any) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool):
        if 0 <= value <= _U64_MAX:
            return value
    return None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return None


def _as_bool(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def _as_string(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


_DECODERS: Dict[Any, Callable[[Any], Any]] = {
    int: _as_int,
    float: _as_float,
    bool: _as_bool,
    str: _as_string,
    list: lambda v: v if isinstance(v, list) else None,
    dict: lambda v: v if isinstance(v, dict) else None,
}


class Row:
    """
    One row of a query result.

    Values are addressed either by their 0-based position or by column name. The
    column name to position mapping is owned by the RowSet that produced the row
    and shared by every row of that result; a row never copies it.

    The typed accessors return None when the value has a different JSON type or the
    column name is unknown. Asking for a position past the row width raises
    IndexError.
    """

    __slots__ = ("_values", "_columns")

    def __init__(self, values: List[Any], columns: Mapping[str, int]):
        self._values = values
        self._columns = columns

    @property
    def column_index(self) -> Mapping[str, int]:
        return self._columns

    def _position(self, key: ColumnKey) -> Optional[int]:
        if isinstance(key, str):
            return self._columns.get(key)
        if key < 0 or key >= len(self._values):
            raise IndexError(
                f"Row position {key} out of range for a row of width {len(self._values)}"
            )
        return key

    def get(self, key: ColumnKey) -> Any:
        """Raw JSON value at `key`, or None for an unknown column name."""
        position = self._position(key)
        if position is None:
            return None
        return self._values[position]

    def _decode(self, key: ColumnKey, decoder: Callable[[Any], Any]) -> Any:
        position = self._position(key)
        if position is None:
            return None
        return decoder(self._values[position])

    def as_string(self, key: ColumnKey) -> Optional[str]:
        return self._decode(key, _as_string)

    def as_int(self, key: ColumnKey) -> Optional[int]:
        return self._decode(key, _as_int)

    def as_unsigned(self, key: ColumnKey) -> Optional[int]:
        return self._decode(key, _as_unsigned)

    def as_float(self, key: ColumnKey) -> Optional[float]:
        return self._decode(key, _as_float)

    def as_bool(self, key: ColumnKey) -> Optional[bool]:
        return self._decode(key, _as_bool)

    def as_array(self, key: ColumnKey, item_type: Any = None) -> Optional[List[Any]]:
        """
        Return the JSON array at `key` as a list.

        With `item_type` every element is decoded as well: the JSON scalar types
        (int, float, bool, str) and containers (list, dict) are checked strictly,
        any other callable is applied to the element. If a single element fails,
        the whole accessor returns None.
        """
        value = self._decode(key, lambda v: v if isinstance(v, list) else None)
        if value is None or item_type is None:
            return None if value is None else list(value)

        decoder = _DECODERS.get(item_type)
        items = []
        for element in value:
            if decoder is not None:
                decoded = decoder(element)
                if decoded is None:
                    return None
            else:
                try:
                    decoded = item_type(element)
                except (TypeError, ValueError) as e:
                    logger.debug("Could not decode array element %r: %s", element, e)
                    return None
            items.append(decoded)
        return items

    def as_dict(self) -> Dict[str, Any]:
        return {
            name: self._values[i]
            for name, i in self._columns.items()
            if i < len(self._values)
        }

    def __getitem__(self, key: ColumnKey) -> Any:
        position = self._position(key)
        if position is None:
            raise KeyError(key)
        return self._values[position]

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values)

    def __eq__(self, other):
        if not isinstance(other, Row):
            return NotImplemented
        return self._values == other._values and dict(self._columns) == dict(
            other._columns
        )

    __hash__ = None

    def __repr__(self):
        names = sorted(self._columns, key=self._columns.get)
        if len(names) == len(self._values):
            fields = ", ".join(f"{n}={v!r}" for n, v in zip(names, self._values))
        else:
            fields = ", ".join(repr(v) for v in self._values)
        return f"Row({fields})"
