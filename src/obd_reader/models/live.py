"""Live telemetry value object."""

from pydantic import BaseModel, ConfigDict, Field


class LiveReading(BaseModel):
    """One complete read cycle of live data.

    Instances are immutable; the engine replaces its reading wholesale
    after every successful cycle.
    """

    model_config = ConfigDict(frozen=True)

    rpm: int = Field(default=0, ge=0, description="Engine speed (rpm)")
    speed_kmh: int = Field(default=0, ge=0, description="Vehicle speed (km/h)")
    coolant_c: int = Field(default=0, description="Coolant temperature (C)")
    battery_v: float = Field(default=0.0, ge=0, description="Adapter supply voltage (V)")

    def to_dict(self) -> dict:
        """Live block of the exported snapshot."""
        return {
            "rpm": self.rpm,
            "speed_kmh": self.speed_kmh,
            "coolant_c": self.coolant_c,
            "battery_v": self.battery_v,
        }
