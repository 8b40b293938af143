"""
Maps tokenized field sets onto Person models.
"""

from typing import Mapping, Sequence

from person_etl.core.models import Person


def normalize_name(name: str) -> str:
    """Collapse a field name for case-insensitive matching (firstName == first_name)."""
    return name.replace("_", "").replace("-", "").lower()


class PersonFieldSetMapper:
    """
    Binds field set names to Person attributes case-insensitively.

    ``firstName``, ``FIRSTNAME`` and ``first_name`` all bind to
    ``Person.first_name``. Names that match no attribute are rejected when the
    mapper is built, so a misconfigured reader fails before any line is read.
    """

    def __init__(self, names: Sequence[str]):
        """
        Initialize mapper.

        Args:
            names: Field names the tokenizer produces

        Raises:
            ValueError: If a name matches no Person attribute, or two names
                bind to the same attribute
        """
        targets = {
            normalize_name(field): field
            for field in Person.model_fields
            if field != "id"
        }

        self.bindings: dict[str, str] = {}
        unknown = []
        for name in names:
            target = targets.get(normalize_name(name))
            if target is None:
                unknown.append(name)
            elif target in self.bindings.values():
                raise ValueError(f"Field '{name}' binds to '{target}' more than once")
            else:
                self.bindings[name] = target

        if unknown:
            raise ValueError(
                f"Fields {unknown} match no Person attribute "
                f"(known: {sorted(targets.values())})"
            )

    def map_field_set(self, fields: Mapping[str, str]) -> Person:
        """
        Build a Person from a tokenized field set.

        Args:
            fields: Field name to token mapping

        Returns:
            New Person with bound attributes set
        """
        return Person.model_validate(
            {
                self.bindings[name]: value
                for name, value in fields.items()
                if name in self.bindings
            }
        )
