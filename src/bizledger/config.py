"""Runtime configuration read from BIZLEDGER_* environment variables."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

STORE_ENV = "BIZLEDGER_STORE"
USER_ENV = "BIZLEDGER_USER"
BUSINESS_NAME_ENV = "BIZLEDGER_BUSINESS_NAME"
BUSINESS_EMAIL_ENV = "BIZLEDGER_BUSINESS_EMAIL"
BUSINESS_PHONE_ENV = "BIZLEDGER_BUSINESS_PHONE"
BUSINESS_ADDRESS_ENV = "BIZLEDGER_BUSINESS_ADDRESS"

DEFAULT_BUSINESS_NAME = "Your Business"


@dataclass(frozen=True)
class BusinessInfo:
    """Sender details printed in the invoice PDF header."""

    name: str = DEFAULT_BUSINESS_NAME
    email: str = ""
    phone: str = ""
    address: str = ""

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BusinessInfo":
        env = os.environ if environ is None else environ
        return cls(
            name=env.get(BUSINESS_NAME_ENV) or DEFAULT_BUSINESS_NAME,
            email=env.get(BUSINESS_EMAIL_ENV, ""),
            phone=env.get(BUSINESS_PHONE_ENV, ""),
            address=env.get(BUSINESS_ADDRESS_ENV, ""),
        )
