#Purpose: the "hints" bag attached to requests and responses.
#Keys are looked up case-insensitively but keep the case they were stored with,
#the same way HTTP header names behave. Response headers are copied in here.

from typing import Any, Dict, Optional

from requests.structures import CaseInsensitiveDict


class Hints(CaseInsensitiveDict):
    """
    Key/value side channel for options that have no first-class field.

    Values are stored as given. The typed getters accept both native values
    and their string forms, since hints read from a URL or a header are strings.
    """

    def put(self, key: str, value: Any) -> "Hints":
        self[key] = value
        return self

    def has(self, key: str) -> bool:
        return key in self

    def remove(self, key: str) -> Any:
        return self.pop(key, None)

    def get_bool(self, key: str, default: bool) -> bool:
        value = self.get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered == "true":
                return True
            if lowered == "false":
                return False
            return default
        return bool(value)

    def get_int(self, key: str, default: int) -> int:
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def get_float(self, key: str, default: float) -> float:
        value = self.get(key)
        if value is None:
            return default
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    def get_str(self, key: str, default: Optional[str] = "") -> Optional[str]:
        value = self.get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def copy(self) -> "Hints":
        return Hints(self.items())

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict copy with keys in their stored case."""
        return dict(self.items())
