from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mobilede_feed.services.equipment import parse_field_selectors

MASK = "******"
SENSITIVE_HEADERS = {"authorization", "proxy-authorization"}


class FeedParameters(BaseModel):
    """Call parameters of the mobile.de connector, keyed like the connector configuration."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    uri: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    username: Optional[str] = None
    password: Optional[str] = None
    accept: Optional[str] = None
    useragent: Optional[str] = None
    get_detail: bool = Field(default=False, alias="get-detail")
    equipment_fields: Optional[str] = Field(default=None, alias="equipment-fields")
    equipment_policy: Optional[Literal["expand", "collapse"]] = Field(default=None, alias="equipment-policy")
    encoding: Optional[str] = None

    @field_validator("headers", mode="before")
    @classmethod
    def _none_headers(cls, value):
        return value or {}

    @property
    def field_selectors(self) -> List[str]:
        return parse_field_selectors(self.equipment_fields or "")

    def safe_dump(self) -> Dict[str, object]:
        data = self.model_dump(by_alias=True, exclude_none=True)
        if "password" in data:
            data["password"] = MASK
        if data.get("headers"):
            data["headers"] = {
                name: MASK if name.lower() in SENSITIVE_HEADERS else value
                for name, value in data["headers"].items()
            }
        return data


class FeedRequest(BaseModel):
    parameters: FeedParameters
