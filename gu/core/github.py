"""
GitHub Layer - the pull-request collaborator.

Listing open PRs is best-effort: any failure yields an empty list so the
caller simply runs without PR awareness. Creating a PR is not best-effort
and raises ``GitHubError``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional

import httpx


API_URL = "https://api.github.com"
USER_AGENT = "gu"

_REMOTE_PATTERNS = (
    re.compile(r"^git@github\.com:([^/]+)/(.+?)(?:\.git)?$"),
    re.compile(r"^ssh://git@github\.com/([^/]+)/(.+?)(?:\.git)?$"),
    re.compile(r"^https://github\.com/([^/]+)/(.+?)(?:\.git)?$"),
)
_OWNER_REPO = re.compile(r"^([^/\s]+)/([^/\s]+)$")


class GitHubError(Exception):
    """Raised when the GitHub API rejects a request.

    ``status`` is 0 when the request never got a response.
    """

    def __init__(self, status: int, text: str = ""):
        if status:
            super().__init__(f"GitHub API error ({status})")
        else:
            super().__init__(f"GitHub request failed: {text}")
        self.status = status
        self.text = text


@dataclass(frozen=True)
class RepoRef:
    owner: str
    repo: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class PullRequest:
    number: int
    title: str
    url: str
    is_draft: bool
    head_ref: str
    head_label: str = ""


@dataclass(frozen=True)
class CreatedPull:
    number: int
    url: str


def parse_github_remote(url: str) -> Optional[RepoRef]:
    u = url.strip()
    for pattern in _REMOTE_PATTERNS:
        m = pattern.match(u)
        if m:
            return RepoRef(owner=m.group(1), repo=m.group(2))
    return None


def parse_owner_repo(text: str) -> Optional[RepoRef]:
    m = _OWNER_REPO.match(text.strip())
    if not m:
        return None
    return RepoRef(owner=m.group(1), repo=m.group(2))


def _pull_from_json(raw: dict[str, Any]) -> PullRequest:
    head = raw.get("head")
    if not isinstance(head, dict):
        head = {}
    head_ref = head.get("ref") or ""
    return PullRequest(
        number=int(raw["number"]),
        title=raw.get("title") or "",
        url=raw.get("html_url") or "",
        is_draft=bool(raw.get("draft")),
        head_ref=head_ref,
        head_label=head.get("label") or head_ref,
    )


class GitHubClient:
    def __init__(
        self,
        token: str,
        base_url: str = API_URL,
        client: Optional[httpx.Client] = None,
    ):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client()

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
            "Authorization": f"Bearer {self.token}",
        }

    def list_open_pulls(self, repo: RepoRef) -> list[PullRequest]:
        """Open PRs for ``repo`` in API order, or [] on any failure."""
        url = f"{self.base_url}/repos/{repo.owner}/{repo.repo}/pulls"
        try:
            res = self._client.get(
                url,
                params={"state": "open", "per_page": 100},
                headers=self._headers(),
            )
            if not res.is_success:
                return []
            data = res.json()
            if not isinstance(data, list):
                return []
            return [_pull_from_json(item) for item in data if isinstance(item, dict)]
        except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError):
            return []

    def create_pull(
        self,
        repo: RepoRef,
        title: str,
        body: str,
        head: str,
        base: str,
        draft: bool = False,
    ) -> CreatedPull:
        url = f"{self.base_url}/repos/{repo.owner}/{repo.repo}/pulls"
        payload: dict[str, Any] = {
            "title": title,
            "head": head,
            "base": base,
            "draft": draft,
        }
        if body:
            payload["body"] = body
        try:
            res = self._client.post(url, json=payload, headers=self._headers())
        except httpx.HTTPError as exc:
            raise GitHubError(0, str(exc)) from exc
        if not res.is_success:
            raise GitHubError(res.status_code, res.text)
        try:
            data = res.json()
            return CreatedPull(number=int(data["number"]), url=data.get("html_url") or "")
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise GitHubError(res.status_code, res.text) from exc

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
