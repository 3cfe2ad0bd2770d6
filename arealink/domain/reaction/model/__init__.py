from .result import AttemptOutcome, ReactionResult, RecordedRequest, RecordedResponse

__all__ = ["AttemptOutcome", "ReactionResult", "RecordedRequest", "RecordedResponse"]
