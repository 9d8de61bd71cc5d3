from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for API payloads. Fields are snake_case in Python and camelCase on
    the wire; both spellings are accepted on input.

    >>> class Out(CamelModel):
    ...     short_id: str
    >>> Out(short_id="k3j2").model_dump(by_alias=True)
    {'shortId': 'k3j2'}
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
