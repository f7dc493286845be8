"""GitHub Releases API client.

Publishing is not retried. Before creating a release the client checks
whether one already exists for the tag and refuses with
:class:`DuplicateReleaseError`, so publishing the same tag twice never
creates two releases.

The release is created as a draft and only made public once every asset
has been uploaded. A failed upload deletes the draft, so a re-run starts
from a clean slate.
"""

from __future__ import annotations

import logging
import mimetypes
import re
from typing import TYPE_CHECKING, Any

import requests

from release_flow.exceptions import DuplicateReleaseError, PublishError
from release_flow.interfaces import ReleaseHandle

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from release_flow.core.context import AssetRef

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
API_VERSION = "2022-11-28"

_REMOTE_RE = re.compile(
    r"(?:git@|ssh://git@|https?://)(?:[^/@]+@)?[^/:]+[/:]"
    r"(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$"
)


def parse_github_repo(url: str) -> tuple[str, str] | None:
    """Extract ``(owner, repo)`` from an https or ssh remote URL."""
    match = _REMOTE_RE.match(url.strip())
    if match is None:
        return None
    return match.group("owner"), match.group("repo")


class GitHubReleaseHost:
    """Creates GitHub releases and uploads their assets."""

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str,
        *,
        api_url: str = DEFAULT_API_URL,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": API_VERSION,
            }
        )

    @property
    def releases_url(self) -> str:
        return f"{self.api_url}/repos/{self.owner}/{self.repo}/releases"

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        try:
            return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise PublishError(f"GitHub request failed: {e}") from e

    def get_release_by_tag(self, tag: str) -> dict[str, Any] | None:
        response = self._request("GET", f"{self.releases_url}/tags/{tag}")
        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise PublishError(
                f"Cannot look up release {tag}: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response.json()

    def publish(
        self,
        tag: str,
        name: str,
        notes: str,
        assets: Sequence[AssetRef],
        *,
        prerelease: bool = False,
        target: str | None = None,
    ) -> ReleaseHandle:
        """Create the release for ``tag`` and upload its assets.

        Raises:
            DuplicateReleaseError: If a release for ``tag`` already exists
            PublishError: On any other API failure
        """
        if self.get_release_by_tag(tag) is not None:
            raise DuplicateReleaseError(f"A GitHub release for {tag} already exists", 409)

        payload: dict[str, Any] = {
            "tag_name": tag,
            "name": name,
            "body": notes,
            "prerelease": prerelease,
            "draft": True,
        }
        if target:
            payload["target_commitish"] = target

        response = self._request("POST", self.releases_url, json=payload)
        if response.status_code == 422 and "already_exists" in response.text:
            raise DuplicateReleaseError(f"A GitHub release for {tag} already exists", 422)
        if response.status_code != 201:
            raise PublishError(
                f"Cannot create release {tag}: HTTP {response.status_code} {response.text}",
                status_code=response.status_code,
            )
        draft = response.json()
        release_url = f"{self.releases_url}/{draft['id']}"
        logger.info("Created draft release %s", tag)

        upload_url = str(draft.get("upload_url", "")).split("{", 1)[0]
        asset_urls = []
        try:
            for asset in assets:
                for path in asset.files:
                    asset_urls.append(self._upload(upload_url, path, asset.label))
        except PublishError:
            self._delete_draft(release_url, tag)
            raise

        response = self._request("PATCH", release_url, json={"draft": False})
        if response.status_code != 200:
            self._delete_draft(release_url, tag)
            raise PublishError(
                f"Cannot publish release {tag}: HTTP {response.status_code} {response.text}",
                status_code=response.status_code,
            )
        release = response.json()
        logger.info("Created GitHub release %s", release.get("html_url", tag))

        return ReleaseHandle(
            id=draft["id"],
            tag=tag,
            url=release.get("html_url"),
            asset_urls=tuple(asset_urls),
        )

    def _delete_draft(self, release_url: str, tag: str) -> None:
        try:
            response = self._request("DELETE", release_url)
        except PublishError as e:
            logger.warning("Could not delete draft release %s: %s", tag, e)
            return
        if response.status_code != 204:
            logger.warning(
                "Could not delete draft release %s: HTTP %s", tag, response.status_code
            )
            return
        logger.info("Deleted draft release %s", tag)

    def _upload(self, upload_url: str, path: Path, label: str | None) -> str:
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        params = {"name": path.name}
        if label:
            params["label"] = label
        response = self._request(
            "POST",
            upload_url,
            params=params,
            data=path.read_bytes(),
            headers={"Content-Type": content_type},
        )
        if response.status_code != 201:
            raise PublishError(
                f"Cannot upload {path.name}: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        logger.info("Uploaded asset %s", path.name)
        return response.json().get("browser_download_url", "")
