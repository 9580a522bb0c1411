class MotpError(ValueError):
    """Base class for every input/configuration error of the mOTP generator."""


class MissingCredential(MotpError):
    pass


class InvalidTimeFormat(MotpError):
    pass


class InvalidTimezoneFormat(MotpError):
    pass


class InvalidPeriod(MotpError):
    pass


class LengthExceedsDigestSize(MotpError):
    pass


class InvalidLength(MotpError):
    pass


class UnsupportedDigest(MotpError):
    pass


class InvalidWindow(MotpError):
    pass
