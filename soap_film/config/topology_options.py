"""Options for building film topology."""

from pydantic import BaseModel, Field

from soap_film.constants import DEFAULT_CONTROL_POINT_COUNT, DEFAULT_SPAN_SUBDIVISIONS


class TopologyOptions(BaseModel):
    """
    Parameters controlling how frames are sampled and bridged.

    Attributes
    ----------
    span_subdivisions : int
        Number of grid cells along each bridging strip between two frames.
        Zero or negative values produce an empty topology.
    control_point_count : int
        Number of control points sampled from the base shape when a frame is
        created with deformation enabled
    """

    span_subdivisions: int = Field(
        default=DEFAULT_SPAN_SUBDIVISIONS,
        description="Grid cells along each bridging strip",
    )
    control_point_count: int = Field(
        default=DEFAULT_CONTROL_POINT_COUNT,
        ge=4,
        description="Control points sampled for deformable frames",
    )

    model_config = {
        "extra": "forbid",
    }
