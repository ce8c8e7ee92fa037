"""Oembed Client Module."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import requests

from vidembed.config.settings import MaxResolution
from vidembed.models.schemas.embed import EmbedRecord

__all__ = ["OembedClient", "build_endpoint_url"]


def build_endpoint_url(
    endpoint_template: str,
    video_url: str,
    video_id: str,
    max_resolution: MaxResolution = MaxResolution.NONE,
) -> str:
    """Build the oembed request URL for a video.

    ``{url}`` and ``{id}`` are replaced with the URL-encoded video URL and id.
    When a maximum resolution is configured and the template does not already
    constrain the width, ``maxwidth`` and ``maxheight`` are appended.

    Args:
        endpoint_template (str): Provider endpoint template
        video_url (str): URL of the video page
        video_id (str): Provider-scoped video id
        max_resolution (MaxResolution): Largest size to request

    Returns:
        str: The request URL
    """
    url = endpoint_template.replace("{url}", quote(video_url, safe="")).replace(
        "{id}", quote(video_id, safe="")
    )

    dimensions = max_resolution.dimensions
    if dimensions and "maxwidth" not in endpoint_template.lower():
        width, height = dimensions
        separator = "&" if "?" in url else "?"
        url = f"{url}{separator}maxwidth={width}&maxheight={height}"

    return url


class OembedClient:
    """Synchronous oembed client performing exactly one request per fetch."""

    def __init__(
        self,
        timeout: float = 5.0,
        privacy_enhanced: bool = False,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            timeout (float): Upper bound in seconds for connecting and reading
            privacy_enhanced (bool): Rewrite embeds to their no-tracking variants
            session (requests.Session | None): Session to reuse, one is created
                if not given
        """
        self.timeout = timeout
        self.privacy_enhanced = privacy_enhanced
        self._session = session

    @property
    def session(self) -> requests.Session:
        """Get or create the requests session."""
        if self._session is None:
            from vidembed import __version__

            self._session = requests.Session()
            self._session.headers.update(
                {
                    "Accept": "application/json",
                    "User-Agent": f"VidEmbed/{__version__}",
                }
            )
        return self._session

    def close(self) -> None:
        """Close the requests session."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> OembedClient:
        """Context manager enter method."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit method."""
        self.close()

    def fetch(
        self,
        endpoint_template: str,
        video_url: str,
        video_id: str,
        max_resolution: MaxResolution = MaxResolution.NONE,
    ) -> tuple[EmbedRecord, int]:
        """Fetch the embed record of a video from its provider.

        Failures never raise: a non-2xx status, an empty or malformed body or
        a payload without ``html`` produce an invalid record carrying the HTTP
        status. Timeouts and connection errors produce status 0.

        Args:
            endpoint_template (str): Provider endpoint template
            video_url (str): URL of the video page
            video_id (str): Provider-scoped video id
            max_resolution (MaxResolution): Largest size to request

        Returns:
            tuple[EmbedRecord, int]: The record and the HTTP status code
        """
        url = build_endpoint_url(endpoint_template, video_url, video_id, max_resolution)

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException:
            return EmbedRecord.failed(video_id, video_url, 0), 0

        status = response.status_code
        if not 200 <= status < 300 or not response.content:
            return EmbedRecord.failed(video_id, video_url, status), status

        try:
            payload: Any = response.json()
        except ValueError:
            return EmbedRecord.failed(video_id, video_url, status), status

        html = payload.get("html") if isinstance(payload, dict) else None
        if not isinstance(html, str) or not html.strip():
            return EmbedRecord.failed(video_id, video_url, status), status

        if self.privacy_enhanced:
            html = self._privacy_rewrite(html)

        return EmbedRecord.from_oembed(video_id, video_url, payload, html), status

    @staticmethod
    def _privacy_rewrite(html: str) -> str:
        """Switch embeds to youtube-nocookie.com and Vimeo's do-not-track mode."""
        return html.replace("youtube.com/", "youtube-nocookie.com/").replace(
            "?app_id=", "?dnt=1&app_id="
        )
