"""Request bodies shared by the API routes.

Clients send camelCase keys (`userId`, `threadId`); snake_case is accepted too.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from brifify.ledger.models import ProviderIdentity


class ApiRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class IdentityPayload(ApiRequest):
    """Provider details for a registered session. `user_id` is the subject."""

    email: str | None = None
    provider_name: str | None = None
    external_id: str | None = None

    def to_identity(self, subject: str) -> ProviderIdentity:
        return ProviderIdentity(
            subject=subject,
            email=self.email,
            provider_name=self.provider_name,
            external_id=self.external_id,
        )


class UserRequest(ApiRequest):
    user_id: str | None = Field(default=None, max_length=255)
