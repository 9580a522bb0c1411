import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from motp_config import MotpConfig
from motp_errors import MotpError
from motp_utils import MAX_VALID_WINDOW, generate_motp, verify_motp_code


logger = logging.getLogger(__name__)

app = FastAPI()
config = MotpConfig()


# ---------- Request models ----------

class GenerateRequest(BaseModel):
    secret: Optional[str] = None
    pin: Optional[str] = None
    period: int = config.period
    length: Optional[int] = config.length
    time: Optional[str] = None
    tz: Optional[str] = None
    digest: str = config.digest


class VerifyRequest(BaseModel):
    secret: Optional[str] = None
    pin: Optional[str] = None
    code: str
    period: int = config.period
    valid_window: int = Field(1, ge=0, le=MAX_VALID_WINDOW)
    time: Optional[str] = None
    tz: Optional[str] = None
    digest: str = config.digest


# ---------- Health check ----------

@app.get("/")
def health_check():
    return {"status": "ok"}


# ---------- API endpoints ----------

@app.post("/generate-motp")
def generate_motp_endpoint(payload: GenerateRequest):
    """
    Generate the mOTP code for the supplied credential and time.
    Returns the code and how many seconds it remains valid.
    """
    try:
        result = generate_motp(
            payload.secret,
            payload.pin,
            period=payload.period,
            length=payload.length,
            time_str=payload.time,
            tz=payload.tz,
            digest=payload.digest,
        )
    except MotpError as e:
        logger.info("Rejected generate request: %s", e)
        raise HTTPException(status_code=400, detail=str(e))

    return {"code": result.code, "valid_for": result.valid_for, "step": result.step}


@app.post("/verify-motp")
def verify_motp(payload: VerifyRequest):
    """
    Verify a provided mOTP code against the same parameters
    used by /generate-motp.
    """
    try:
        is_valid = verify_motp_code(
            payload.secret,
            payload.pin,
            payload.code,
            period=payload.period,
            valid_window=payload.valid_window,
            time_str=payload.time,
            tz=payload.tz,
            digest=payload.digest,
        )
    except MotpError as e:
        logger.info("Rejected verify request: %s", e)
        raise HTTPException(status_code=400, detail=str(e))

    return {"valid": is_valid}
