from pydantic import BaseModel, ConfigDict


class UserInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
