"""Channel record contract."""

from pydantic import BaseModel, ConfigDict, Field


class Channel(BaseModel):
    """Chat channel served by the bot.

    ``rsn`` is the default player looked up when a command names none.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(..., min_length=1)
    is_connected: bool = Field(False, serialization_alias="isConnected")
    rsn: str = ""
