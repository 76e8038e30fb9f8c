# squat_counter/exceptions.py


class SquatCounterError(Exception):
    """Base class for errors that end a session."""


class PoseEngineError(SquatCounterError):
    """The pose-estimation engine could not be created or failed to load its model."""


class CameraError(SquatCounterError):
    """The camera could not be opened."""
