"""User document model (``users`` collection)."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from formation_api.db.mongo import stringify_id


class UserStatus(str, Enum):
    """Presence status."""

    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


class Contact(BaseModel):
    """Entry of a user's ordered contact list."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    order_id: Optional[str] = None
    contact_id: Optional[str] = None
    contact_name: Optional[str] = None


class VerificationDetails(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_email_verified: bool = False
    is_phone_number_verified: bool = False


class User(BaseModel):
    """User account as stored in MongoDB (camelCase keys)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    email: str
    password: Optional[str] = None  # bcrypt hash, never plaintext
    name: Optional[str] = None
    profile_picture: Optional[str] = None
    role: str = "STUDENT"
    user_status: UserStatus = UserStatus.OFFLINE
    verification_details: VerificationDetails = Field(default_factory=VerificationDetails)
    contacts: List[Contact] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "User":
        return cls.model_validate(stringify_id(doc))

    def to_document(self) -> Dict[str, Any]:
        """Serialize for storage; ``_id`` is left out when not assigned yet."""
        doc = self.model_dump(by_alias=True, mode="python")
        doc["userStatus"] = self.user_status.value
        if doc.get("_id") is None:
            doc.pop("_id", None)
        return doc

    def public_dict(self) -> Dict[str, Any]:
        """JSON-ready representation without the password hash."""
        return self.model_dump(by_alias=True, mode="json", exclude={"password"})

    def profile(self) -> Dict[str, Any]:
        """Filtered profile returned by the getUserInfo endpoints."""
        data = self.model_dump(by_alias=True, mode="json")
        return {
            "createdAt": data["createdAt"],
            "name": data["name"],
            "email": data["email"],
            "profilePicture": data["profilePicture"],
            "_id": data["_id"],
            "contacts": data["contacts"],
        }

    def __repr__(self):
        return f"<User {self.email} ({self.user_status.value})>"
