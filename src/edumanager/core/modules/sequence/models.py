"""Named counters used to mint human-readable sequential ids."""

from pydantic import BaseModel, Field

BASELINE = 0  # Value of a fresh or reset sequence; the first allocated id is BASELINE + 1


class Sequence(BaseModel):
    """Next-value state for one named counter.

    Stored in the `counters` collection keyed by name, so at most one
    record exists per sequence. Mutated only through atomic $inc or an
    explicit reset.
    """

    name: str = Field(alias="_id")
    value: int = Field(default=BASELINE, ge=0)

    model_config = {"populate_by_name": True}
