"""Topology entities looked up by the report operations."""

from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, Field

EXPECTED_MEAN_CODE = "EXPECTED_MEAN"
EXPECTED_STD_DEV_CODE = "EXPECTED_STD_DEV"
BATTERY_CHARGE_PERCENTAGE_CODE = "BATTERY_CHARGE"


class Network(BaseModel):
    """A monitored network grouping gateways."""

    code: str
    name: Optional[str] = None
    description: Optional[str] = None


class Gateway(BaseModel):
    """A gateway collecting measurements from its sensors."""

    code: str
    name: Optional[str] = None
    description: Optional[str] = None
    network_code: Optional[str] = None
    parameters: Dict[str, float] = Field(
        default_factory=dict,
        description="Scalar configuration values keyed by parameter code.",
    )

    def parameter(self, code: str) -> Optional[float]:
        return self.parameters.get(code)


class Sensor(BaseModel):
    """A sensor reporting values through a gateway."""

    code: str
    name: Optional[str] = None
    description: Optional[str] = None
    gateway_code: Optional[str] = None
