from pydantic import BaseModel


class WebhookAckResponse(BaseModel):
    status: str = 'ok'

    class Config:
        json_schema_extra = {'example': {'status': 'ok'}}
