#!/usr/bin/env python3

import os
import sys
import datetime

import pytz

from motp_config import MotpConfig
from motp_errors import MotpError
from motp_utils import generate_motp_code


def main():
    config = MotpConfig()

    # 1. Read credential from the environment
    secret = os.getenv("MOTP_SECRET")
    pin = os.getenv("MOTP_PIN")
    if not secret or not pin:
        print("MOTP_SECRET and MOTP_PIN must be set. Cannot generate mOTP code.")
        return 1

    # 2. Sample the clock once, use it for both the code and the log line
    now = datetime.datetime.now(pytz.utc)

    # 3. Generate mOTP
    try:
        code = generate_motp_code(
            secret, pin, period=config.period, length=config.length, digest=config.digest, now=now
        )
    except MotpError as e:
        print("mOTP generation error:", e)
        return 1

    # 4. Output
    timestamp = now.strftime("%Y-%m-%d %H:%M:%S")
    print(f"{timestamp} - mOTP Code: {code}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
