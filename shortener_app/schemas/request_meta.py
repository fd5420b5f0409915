"""
Request metadata attached to every audited store operation.
"""

import json
from typing import Optional

from fastapi import Request
from pydantic import BaseModel, Field


class RequestMeta(BaseModel):
    """
    Who asked, captured at the HTTP edge and stored with the access event.
    """

    address: Optional[str] = Field(None, description="Client address as host:port")
    header: Optional[str] = Field(None, description="Request headers as a JSON object")

    model_config = {
        "json_schema_extra": {
            "example": {
                "address": "192.168.1.1:53422",
                "header": '{"host": "sho.rt", "user-agent": "curl/8.4.0"}',
            }
        }
    }

    @classmethod
    def from_request(cls, request: Request) -> "RequestMeta":
        address = None
        if request.client:
            address = f"{request.client.host}:{request.client.port}"
        header = json.dumps(dict(request.headers.items()))
        return cls(address=address, header=header)
