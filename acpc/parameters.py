"""Algorithm parameters for area-constrained partitioning."""

from pydantic import BaseModel, ConfigDict, Field


class AlgParameters(BaseModel):
    """
    Step sizes, tolerances and iteration caps of the partitioning algorithm.

    The defaults give reasonable partitions with reasonable effort in most
    scenarios. Out-of-range values raise pydantic.ValidationError.
    """

    model_config = ConfigDict(frozen=True)

    line_int_step: float = Field(default=0.1, gt=0, le=1, description="Normalized spacing for line integrals")
    weights_step: float = Field(default=0.1, gt=0, description="Step size of the weight updates")
    centers_step: float = Field(default=1.0, gt=0, le=1, description="Step size of the center updates")
    volume_tolerance: float = Field(default=0.002, gt=0, description="Squared volume error accepted by the inner loop")
    convergence_criterion: float = Field(default=0.02, gt=0, description="Center displacement that stops the outer loop")
    max_iterations_volume: int = Field(default=200, gt=0, description="Cap on weight iterations per center step")
    max_iterations_centers: int = Field(default=500, gt=0, description="Cap on center iterations")
    volume_lower_bound: float = Field(default=1e-5, gt=0, lt=1, description="Floor on the weighted area of a region")
    robustness_constant: float = Field(default=1e-7, gt=0, description="Distances below this are treated as zero")

    @property
    def mult(self) -> int:
        """Integer scale factor used for polygon clipping."""
        return int(round(1.0 / self.robustness_constant))
