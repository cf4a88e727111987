import uuid

from pydantic import BaseModel, ConfigDict, Field

# canonical export order; import accepts any order as long as names match
CSV_COLUMNS = [
    "id",
    "name",
    "identifier",
    "phone",
    "attended",
    "receivedStipend",
    "stipendDate",
    "markedBy",
    "notes",
]

# external (camelCase) column names mapped to model attributes
FIELD_ALIASES = {
    "receivedStipend": "received_stipend",
    "stipendDate": "stipend_date",
    "markedBy": "marked_by",
}

BOOLEAN_FIELDS = ("attended", "received_stipend")


def new_participant_id() -> str:
    """Mint a fresh opaque participant identifier."""
    return str(uuid.uuid4())


def resolve_field_name(field: str) -> str:
    """Map an external or attribute field name to the model attribute name.

    Args:
        field: Column name (ex: "receivedStipend") or attribute name.

    Returns:
        str: Attribute name on `Participant`.

    Raises:
        ValueError: If the field does not exist or cannot be edited.
    """
    attribute = FIELD_ALIASES.get(field, field)
    if attribute == "id":
        raise ValueError("Participant id cannot be changed.")
    if attribute not in Participant.model_fields:
        raise ValueError(f"Unknown participant field: {field}")
    return attribute


class Participant(BaseModel):
    """
    Represents a single tracked participant.

    Attributes:
        id (str): Opaque unique identifier, assigned once and never reused.
        name (str): Display name; never blank for a stored record.
        identifier (str or None): Reference number or external ID.
        phone (str or None): Contact number.
        attended (bool): Whether the participant attended.
        received_stipend (bool): Whether the stipend has been handed out.
        stipend_date (str or None): Free-text disbursement timestamp.
        marked_by (str or None): Who marked the stipend status.
        notes (str or None): Free-text notes.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_participant_id)
    name: str = Field(..., description="Display name of the participant.")
    identifier: str | None = Field(None, description="ID or reference number.")
    phone: str | None = Field(None, description="Phone number.")
    attended: bool = Field(False, description="Attendance flag.")
    received_stipend: bool = Field(
        False, alias="receivedStipend", description="Stipend disbursement flag."
    )
    stipend_date: str | None = Field(
        None, alias="stipendDate", description="Stipend disbursement date."
    )
    marked_by: str | None = Field(
        None, alias="markedBy", description="Who marked the stipend status."
    )
    notes: str | None = Field(None, description="Free-text notes.")

    def __str__(self):
        return f"{self.name}"

    def with_field(self, field: str, value) -> "Participant":
        """Return a copy of this participant with one field replaced.

        The value is stored as given; no type checks are applied.

        Args:
            field: Column or attribute name to change.
            value: New value for the field.

        Returns:
            Participant: Updated copy.
        """
        return self.model_copy(update={resolve_field_name(field): value})

    def to_storage(self) -> dict:
        """Serialize using the external (camelCase) field names."""
        return self.model_dump(by_alias=True)
