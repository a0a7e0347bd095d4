from typing import Literal, Optional

from pydantic import BaseModel


class StatusResponse(BaseModel):
	status: Literal["ok"]


class InfoResponse(BaseModel):
	stage: str
	version: str
	started_at: Optional[float] = None
