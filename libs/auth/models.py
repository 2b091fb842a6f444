from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    """
    Represents an authenticated caller, decoded from a GainVault JWT.
    """

    user_id: str = Field(..., alias="sub")
    wallet_address: Optional[str] = Field(None, alias="walletAddress")
    role: str = "authenticated"

    model_config = ConfigDict(populate_by_name=True)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
