"""Base model shared by all LessonSync records."""
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DomainModel(BaseModel):
    """Base class for domain records.

    Attributes are snake_case in Python and camelCase on the wire. Both
    spellings are accepted when validating input.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
        validate_assignment=True,
    )

    def to_dict(self, **kwargs: Any) -> Dict[str, Any]:
        """Convert the model to a JSON-compatible dictionary using wire names."""
        kwargs.setdefault('exclude_none', True)
        kwargs.setdefault('by_alias', True)
        return self.model_dump(mode='json', **kwargs)
