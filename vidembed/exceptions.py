"""VidEmbed exception classes."""


class VidEmbedError(Exception):
    """Base class for all VidEmbed exceptions."""


# Configuration errors
class ConfigError(VidEmbedError):
    """Base class for configuration-related errors."""


class DataPathError(ConfigError, ValueError):
    """The configured data directory path cannot hold the cache database."""


# Database errors
class DatabaseError(VidEmbedError):
    """Base class for database-related errors."""


class EmbedCacheWriteError(DatabaseError):
    """Writing an embed record kept failing after every retry attempt."""

    def __init__(self, video_id: str, attempts: int) -> None:
        """Record which video could not be written and how often it was tried.

        Args:
            video_id (str): Video id of the record being written
            attempts (int): Number of write attempts made
        """
        super().__init__(
            f"Failed to write embed cache entry for '{video_id}' "
            f"after {attempts} attempts"
        )
        self.video_id = video_id
        self.attempts = attempts
