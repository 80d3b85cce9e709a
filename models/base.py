"""Base model with camelCase serialization for API output."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every record the engine emits; serializes as camelCase.

    Accepts both ``risk_score`` and ``riskScore`` on input so adapters and
    API callers can use either spelling.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
