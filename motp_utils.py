import datetime
import logging
from dataclasses import dataclass
from typing import Optional

from cryptography.hazmat.primitives import hashes
from pyotp.utils import strings_equal

from motp_errors import (
    InvalidLength,
    InvalidPeriod,
    InvalidTimeFormat,
    InvalidWindow,
    LengthExceedsDigestSize,
    MissingCredential,
    UnsupportedDigest,
)
from time_utils import apply_tz_offset, resolve_time, to_epoch_seconds

logger = logging.getLogger(__name__)

DEFAULT_PERIOD = 10
DEFAULT_LENGTH = 6
DEFAULT_DIGEST = "md5"
MAX_VALID_WINDOW = 10

DIGEST_ALGORITHMS = {
    "md5": hashes.MD5,
    "sha1": hashes.SHA1,
    "sha224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
}


@dataclass(frozen=True)
class MotpResult:
    code: str
    time: datetime.datetime
    step: int
    valid_for: int


# ---------- Input checks ----------

def _digest_algorithm(digest: str) -> hashes.HashAlgorithm:
    algorithm = DIGEST_ALGORITHMS.get(str(digest).lower())
    if algorithm is None:
        raise UnsupportedDigest(
            f"Unsupported digest {digest!r}, expected one of: {', '.join(DIGEST_ALGORITHMS)}"
        )
    return algorithm()


def digest_hex_length(digest: str = DEFAULT_DIGEST) -> int:
    return _digest_algorithm(digest).digest_size * 2


def check_credentials(secret: Optional[str], pin: Optional[str]) -> None:
    # Never put the values themselves into the message
    if not secret:
        raise MissingCredential("secret is required")
    if not pin:
        raise MissingCredential("pin is required")


def check_period(period) -> int:
    if isinstance(period, bool) or not isinstance(period, int) or period <= 0:
        raise InvalidPeriod(f"period must be a positive whole number of seconds, got {period!r}")
    return period


def check_length(length, digest: str = DEFAULT_DIGEST) -> int:
    """
    Validate the requested code length against the digest size.

    None means the default length; an explicit 0 is kept as is.
    """
    if length is None:
        length = DEFAULT_LENGTH
    if isinstance(length, bool) or not isinstance(length, int) or length < 0:
        raise InvalidLength(f"length must be a non-negative whole number, got {length!r}")

    max_length = digest_hex_length(digest)
    if length > max_length:
        raise LengthExceedsDigestSize(
            f"length {length} exceeds the {max_length}-character {digest} digest"
        )
    return length


# ---------- Pipeline stages ----------

def _epoch_and_step(civil: datetime.datetime, period: int):
    epoch = to_epoch_seconds(civil)
    if epoch < 0:
        raise InvalidTimeFormat(f"Time {civil.isoformat()} is before the Unix epoch")
    return epoch, epoch // period


def compute_step(civil: datetime.datetime, period: int = DEFAULT_PERIOD) -> int:
    """Number of whole periods elapsed since the Unix epoch."""
    check_period(period)
    return _epoch_and_step(civil, period)[1]


def derive_digest(step: int, secret: str, pin: str, digest: str = DEFAULT_DIGEST) -> str:
    """
    Digest of step || secret || pin as a lowercase hex string.

    The concatenation has no separators; this is what mOTP tokens compute.
    """
    hasher = hashes.Hash(_digest_algorithm(digest))
    hasher.update(f"{step}{secret}{pin}".encode("utf-8"))
    return hasher.finalize().hex()


def format_code(digest_str: str, length: Optional[int] = DEFAULT_LENGTH) -> str:
    if length is None:
        length = DEFAULT_LENGTH
    if length < 0:
        raise InvalidLength(f"length must be a non-negative whole number, got {length!r}")
    if length > len(digest_str):
        raise LengthExceedsDigestSize(
            f"length {length} exceeds the {len(digest_str)}-character digest"
        )
    return digest_str[:length]


# ---------- Public API ----------

def generate_motp(
    secret: str,
    pin: str,
    period: int = DEFAULT_PERIOD,
    length: Optional[int] = DEFAULT_LENGTH,
    time_str: Optional[str] = None,
    tz: Optional[str] = None,
    digest: str = DEFAULT_DIGEST,
    now: Optional[datetime.datetime] = None,
) -> MotpResult:
    """
    Generate an mOTP code together with the details used to derive it.

    Args:
        secret: shared secret
        pin: user PIN
        period: seconds each code stays valid
        length: number of hex characters in the code (None = 6)
        time_str: optional time string in one of the supported formats
        tz: optional '+HHMM' style offset overriding the time's own zone
        digest: digest algorithm name (md5 for standard mOTP)
        now: current time to use instead of sampling the clock

    Returns:
        MotpResult with the code, resolved time, step and seconds left
    """
    # Configuration errors first, before touching the clock
    check_credentials(secret, pin)
    check_period(period)
    length = check_length(length, digest)

    civil = apply_tz_offset(resolve_time(time_str, now=now), tz)
    epoch, step = _epoch_and_step(civil, period)
    logger.debug("Using step %d (period %ds)", step, period)

    code = format_code(derive_digest(step, secret, pin, digest), length)
    return MotpResult(code=code, time=civil, step=step, valid_for=period - epoch % period)


def generate_motp_code(
    secret: str,
    pin: str,
    period: int = DEFAULT_PERIOD,
    length: Optional[int] = DEFAULT_LENGTH,
    time_str: Optional[str] = None,
    tz: Optional[str] = None,
    digest: str = DEFAULT_DIGEST,
    now: Optional[datetime.datetime] = None,
) -> str:
    """Generate the mOTP code string only."""
    return generate_motp(secret, pin, period, length, time_str, tz, digest, now).code


def verify_motp_code(
    secret: str,
    pin: str,
    code: str,
    period: int = DEFAULT_PERIOD,
    valid_window: int = 1,
    time_str: Optional[str] = None,
    tz: Optional[str] = None,
    digest: str = DEFAULT_DIGEST,
    now: Optional[datetime.datetime] = None,
) -> bool:
    """
    Verify an mOTP code with time window tolerance

    Args:
        code: code to check; its length is the length compared
        valid_window: number of periods before/after to accept (default 1 = +-10s)

    Returns:
        True if code matches any step in the window, False otherwise
    """
    check_credentials(secret, pin)
    check_period(period)
    if isinstance(valid_window, bool) or not isinstance(valid_window, int) \
            or not 0 <= valid_window <= MAX_VALID_WINDOW:
        raise InvalidWindow(
            f"valid_window must be a whole number between 0 and {MAX_VALID_WINDOW}, got {valid_window!r}"
        )

    code = (code or "").strip().lower()
    if not code or len(code) > digest_hex_length(digest):
        return False

    step = compute_step(apply_tz_offset(resolve_time(time_str, now=now), tz), period)
    for candidate in range(step - valid_window, step + valid_window + 1):
        if candidate < 0:
            continue
        expected = format_code(derive_digest(candidate, secret, pin, digest), len(code))
        if strings_equal(expected, code):
            return True
    return False
