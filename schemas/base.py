"""
RecipeShare Schema Base
Request models accept camelCase keys (snake_case also works)
"""

from typing import Annotated
from pydantic import AfterValidator, BaseModel, ConfigDict, HttpUrl
from pydantic.alias_generators import to_camel


def http_url(max_length: int):
    """Absolute http(s) URL, kept as a plain string and bounded by its column width"""

    def check_length(value: str) -> str:
        if len(value) > max_length:
            raise ValueError(f"URL must be at most {max_length} characters")
        return value

    return Annotated[HttpUrl, AfterValidator(str), AfterValidator(check_length)]


ImageUrl = http_url(500)
WebsiteUrl = http_url(255)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)
