""" Defines the ServiceInfo pydantic model. """

from pydantic import BaseModel


class ServiceInfo(BaseModel):
    timestamp: str
    service: str
    data_source: str
    version: str


class Message(BaseModel):
    message: str
