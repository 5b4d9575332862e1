from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FriendshipStatus(str, Enum):
    REQUESTED = "requested"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class FriendshipRequestIn(BaseModel):
    friend_user_id: int = Field(..., gt=0, validation_alias="friendUserId")

    model_config = ConfigDict(populate_by_name=True)


class MessageOut(BaseModel):
    message: str


class FriendProfileOut(BaseModel):
    id: int
    full_name: str | None = None
    phone_number: str | None = None
    total_friend_count: int
    mutual_friend_count: int

    model_config = ConfigDict(from_attributes=True)
