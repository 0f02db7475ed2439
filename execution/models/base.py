# Shared pydantic base for wire models
"""Base model with camelCase aliases on the wire"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Accepts both ``project_root`` and ``projectRoot``; dumps camelCase by alias"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class FrozenWireModel(WireModel):
    """Immutable once constructed"""
    model_config = ConfigDict(frozen=True)
