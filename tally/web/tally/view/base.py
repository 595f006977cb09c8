import pydantic as p
from pydantic.alias_generators import to_camel


class View(p.BaseModel):
    """Request and response bodies travel in camelCase."""

    model_config = p.ConfigDict(alias_generator=to_camel, populate_by_name=True)
