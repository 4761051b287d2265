from pydantic import BaseModel, Field
from typing import List, Optional


class MailRequest(BaseModel):
    to: str
    subject: str
    message: str

    def missing_fields(self) -> List[str]:
        return [name for name in ("to", "subject", "message") if not getattr(self, name)]


class MailAddress(BaseModel):
    address: str
    display_name: Optional[str] = None


class MailerooPayload(BaseModel):
    from_: MailAddress = Field(alias="from")
    to: List[MailAddress]
    subject: str
    html: str
    plain: str
    tracking: bool = True

    class Config:
        populate_by_name = True
