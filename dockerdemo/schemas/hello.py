from typing import List
from pydantic import BaseModel


class HelloResponse(BaseModel):
    message: str


class ApiInfoResponse(BaseModel):
    message: str
    endpoints: List[str]
