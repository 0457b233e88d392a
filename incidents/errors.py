"""
Pipeline errors

Every error here is terminal for a run.
"""


class PipelineError(Exception):
    """Base class for pipeline failures"""


class SourceUnavailable(PipelineError):
    """The raw dataset could not be fetched or parsed"""


class MalformedField(PipelineError):
    """A date or time field does not match its expected pattern"""

    def __init__(self, field: str, count: int, example: str):
        self.field = field
        self.count = count
        self.example = example
        super().__init__(f"{count} row(s) with malformed {field} (e.g. {example!r})")


class InsufficientSeries(PipelineError):
    """Too few observations to fit a seasonal model"""

    def __init__(self, observations: int, required: int):
        self.observations = observations
        self.required = required
        super().__init__(
            f"Series has {observations} observations, need at least {required} (two full seasonal cycles)"
        )


class ModelSelectionError(PipelineError):
    """None of the candidate models could be fitted"""
