"""
Stored record shapes.

Field names are serialized in camelCase so the JSON kept under each storage key
matches what the portal has always written. Timestamps are epoch milliseconds.
"""
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["CANDIDATE", "HR_ADMIN"]
CandidateStatus = Literal["PENDING", "VERIFIED", "REJECTED"]


class StoredRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    def to_storage(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class User(StoredRecord):
    id: str
    name: str
    email: str
    role: Role
    phone: str | None = None
    country_code: str | None = Field(default=None, alias="countryCode")
    created_at: int = Field(alias="createdAt")


class CandidateProfile(User):
    role: Role = "CANDIDATE"
    status: CandidateStatus = "PENDING"
    # Holds a CVMetadata id, not a URL.
    cv_url: str | None = Field(default=None, alias="cvUrl")
    cv_file_name: str | None = Field(default=None, alias="cvFileName")
    last_updated: int = Field(alias="lastUpdated")

    def as_user(self) -> User:
        return User.model_validate(self.model_dump(include=set(User.model_fields)))


class CVMetadata(StoredRecord):
    id: str
    candidate_id: str = Field(alias="candidateId")
    file_name: str = Field(alias="fileName")
    upload_date: int = Field(alias="uploadDate")
    # data:<mime>;base64,<payload>
    content: str


class ActivityLog(StoredRecord):
    id: str
    user_id: str = Field(alias="userId")
    action: str
    timestamp: int
