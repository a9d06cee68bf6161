"""
Event classification.

Selects the view of the triggering event that dispatch cares about: the
commits of a push, or the fields of a pull request. Every other event is
treated as carrying no context.
"""

from typing import List, Optional, Union

from pydantic import BaseModel

from works_bridge.models.event import Commit, EventContext, EventKind


class PushView(BaseModel):
    """Commits delivered with a push event, in push order."""

    commits: List[Commit] = []

    @property
    def commit_count(self) -> int:
        return len(self.commits)

    def candidate_texts(self) -> List[str]:
        return [commit.message for commit in self.commits]


class PullRequestView(BaseModel):
    """Pull request fields relevant to dispatch."""

    number: int
    title: str
    body: str = ""
    html_url: Optional[str] = None
    merged: bool = False

    def candidate_texts(self) -> List[str]:
        return [self.title, self.body]


EventView = Union[PushView, PullRequestView]


def classify_event(event: EventContext) -> Optional[EventView]:
    """
    Determine the dispatch view for an event.

    Args:
        event: Triggering event snapshot

    Returns:
        PushView, PullRequestView, or None when no context is available
    """
    kind = event.kind

    if kind is EventKind.PUSH:
        return PushView(commits=event.commits)

    if kind is EventKind.PULL_REQUEST:
        pr = event.pull_request
        if pr is None:
            return None
        return PullRequestView(
            number=pr.number,
            title=pr.title,
            body=pr.body or "",
            html_url=pr.html_url,
            merged=bool(pr.merged),
        )

    return None
