"""VidEmbed: replace bare YouTube and Vimeo links with cached oembed markup."""

from vidembed.utils.logging import Logger, get_logger
from vidembed.utils.version import get_pyproject_version

__license__ = "MIT"
__version__ = get_pyproject_version()

log: Logger = get_logger()
