from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class AnalysisModel(BaseModel):
    """Immutable value object shared by every analyzer result.

    Attributes are snake_case in Python; ``model_dump(by_alias=True)`` emits the
    camelCase keys consumed by the dashboard and chat clients.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_dict(self) -> dict:
        """JSON-ready dict with camelCase keys and unset optionals dropped."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
