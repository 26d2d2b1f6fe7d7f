from pydantic import BaseModel, ConfigDict, Field


class VerifyIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: str | None = Field(None, description="The one-time activation code")
    machine_id: str | None = Field(
        None,
        alias="machineId",
        description="Identifier of the machine activating the code",
    )
