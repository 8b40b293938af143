"""
Person model representing one row of the people file.
"""

from pydantic import BaseModel, Field


class Person(BaseModel):
    """
    A single person record flowing through the pipeline.

    Built fresh for every parsed line, replaced (never mutated) by the
    processor, and handed to the writer. Only the persisted copy returned by
    the writer carries a generated ``id``.

    Attributes:
        id: Identity generated by the store on first write
        user_id: Business identifier from the source file
        first_name: Given name
        last_name: Family name
        gender: Gender as written in the source
        email: E-mail address
        phone: Phone number
        date_of_birth: Date of birth, kept as source text
        job_title: Job title
    """

    id: int | None = None
    user_id: str | None = Field(None, alias="userId")
    first_name: str | None = Field(None, alias="firstName")
    last_name: str | None = Field(None, alias="lastName")
    gender: str | None = None
    email: str | None = None
    phone: str | None = None
    date_of_birth: str | None = Field(None, alias="dateOfBirth")
    job_title: str | None = Field(None, alias="jobTitle")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "id": 1,
                "userId": "88F7B33d2bcf9f5",
                "firstName": "SHELBY",
                "lastName": "TERRELL",
                "gender": "Male",
                "email": "elijah57@example.net",
                "phone": "001-084-906-7849x73518",
                "dateOfBirth": "1945-10-26",
                "jobTitle": "Games developer",
            }
        }


# Column order used by the warehouse, excluding the generated id
PERSON_COLUMNS: tuple[str, ...] = (
    "user_id",
    "first_name",
    "last_name",
    "gender",
    "email",
    "phone",
    "date_of_birth",
    "job_title",
)

# Header names of the people file, in file order
PERSON_FIELD_NAMES: tuple[str, ...] = (
    "userId",
    "firstName",
    "lastName",
    "gender",
    "email",
    "phone",
    "dateOfBirth",
    "jobTitle",
)
