class ValidationError(Exception):
    pass


class UnknownInputError(ValidationError):
    """Raised when a stream reads from a stream that is not part of the graph."""

    def __init__(self, stream_id: str, missing: frozenset[str]):
        self.stream_id = stream_id
        self.missing = missing
        names = ", ".join(sorted(missing))
        super().__init__(f"Stream '{stream_id}': unknown input stream(s) {{{names}}}")
