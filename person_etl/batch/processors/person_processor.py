"""
Person processor - uppercases first and last names.
"""

from abc import ABC, abstractmethod

from person_etl.core.errors import ValidationError
from person_etl.core.models import Person

REQUIRED_NAME_FIELDS = ("first_name", "last_name")


def uppercase_names(person: Person) -> Person:
    """
    Return a copy of ``person`` with first_name and last_name in upper case.

    Args:
        person: Parsed person

    Returns:
        New Person; the input is not modified

    Raises:
        ValidationError: If first_name or last_name is missing
    """
    for field_name in REQUIRED_NAME_FIELDS:
        if getattr(person, field_name) is None:
            raise ValidationError(field_name=field_name, message="Field value is null")

    return person.model_copy(
        update={
            "first_name": person.first_name.upper(),
            "last_name": person.last_name.upper(),
        }
    )


class BaseItemProcessor(ABC):
    """
    Abstract base class for record processors.

    A processor returns the transformed record, or None to filter it out of
    the chunk. It must not perform I/O.
    """

    @abstractmethod
    def process(self, person: Person) -> Person | None:
        """
        Transform one record.

        Raises:
            ValidationError: If the record cannot be transformed
        """


class PersonProcessor(BaseItemProcessor):
    """Uppercases first and last names; never filters."""

    def process(self, person: Person) -> Person:
        return uppercase_names(person)
