import os
from dataclasses import dataclass, field

from motp_errors import InvalidLength, InvalidPeriod


def _env_int(name: str, default: int, error) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise error(f"{name} must be a whole number, got {value!r}")


@dataclass(frozen=True)
class MotpConfig:
    period: int = field(default_factory=lambda: _env_int("MOTP_PERIOD", 10, InvalidPeriod))
    length: int = field(default_factory=lambda: _env_int("MOTP_LENGTH", 6, InvalidLength))
    digest: str = field(default_factory=lambda: os.getenv("MOTP_DIGEST", "md5"))
