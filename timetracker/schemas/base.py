"""
Shared schema building blocks.
"""
from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..core.timecalc import to_utc

# SQLite hands back naive datetimes; every instant leaves the API as UTC.
UtcDateTime = Annotated[datetime, AfterValidator(to_utc)]


class CamelModel(BaseModel):
    """Base model exposing camelCase keys and reading ORM attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
