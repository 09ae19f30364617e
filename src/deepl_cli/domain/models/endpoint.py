"""EndpointDescriptor model - describes one API call"""

from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Optional, Tuple, Union

# A factory is called once per attempt so single-read streams can be replayed.
BodyFactory = Callable[[], Iterable[bytes]]
Body = Union[None, bytes, BodyFactory]


@dataclass(frozen=True)
class EndpointDescriptor:
    """Method, path, headers and body of one API call.

    Headers are kept as ``(name, value)`` pairs so a name may repeat.
    """

    method: str
    path: str
    headers: Tuple[Tuple[str, str], ...] = ()
    body: Body = None

    @classmethod
    def build(
        cls,
        method: str,
        path: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Body = None,
    ) -> "EndpointDescriptor":
        """Create a descriptor from a plain header mapping"""
        pairs = tuple((headers or {}).items())
        return cls(method=method.upper(), path=path.lstrip("/"), headers=pairs, body=body)

    def has_header(self, name: str) -> bool:
        """Check if a header is set (case-insensitive)"""
        lowered = name.lower()
        return any(key.lower() == lowered for key, _ in self.headers)

    def open_body(self) -> Union[None, bytes, Iterable[bytes]]:
        """Return the body for a fresh attempt"""
        if self.body is None or isinstance(self.body, bytes):
            return self.body
        return self.body()
