"""Base model class for chainsql models."""

from pydantic import BaseModel, ConfigDict


class ChainSQLBaseModel(BaseModel):
    """Base model for chainsql state and result objects.

    Enum fields are stored by value so states compare and hash by the plain
    tokens that end up in SQL.
    """
    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        use_enum_values=True,
        validate_assignment=True
    )
