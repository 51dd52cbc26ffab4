class CouncilRecoveryError(Exception):
    """Base exception for the recovery layer around the parser."""

    pass


class SectionMissingError(CouncilRecoveryError):
    """Raised when a required section could not be located in the response."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Required section '{name}' not found")


class UpstreamErrorResponse(CouncilRecoveryError):
    """Raised when the upstream agent returned an error message instead of output."""

    def __init__(self, preview: str):
        self.preview = preview
        super().__init__(f"Chairman returned error: {preview}")
