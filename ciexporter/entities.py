"""Projects, refs, environments and deployments tracked by the exporter."""

from __future__ import annotations

import re
import zlib
from dataclasses import dataclass, field
from enum import Enum

from ciexporter.pipelines import Job, Pipeline

_MERGE_REQUEST_PATTERN = r"(\d+)|refs/merge-requests/(\d+)/head"


def _checksum(text: str) -> str:
    return str(zlib.crc32(text.encode("utf-8")))


class RefKind(str, Enum):
    """The kind of a git ref."""

    BRANCH = "branch"
    TAG = "tag"
    MERGE_REQUEST = "merge-request"

    def __str__(self) -> str:
        return self.value


@dataclass
class Deployment:
    job_id: int = 0
    ref_kind: RefKind | None = None
    ref_name: str = ""
    username: str = ""
    timestamp: float = 0.0
    duration_seconds: float = 0.0
    commit_short_id: str = ""
    status: str = ""


@dataclass
class Environment:
    project_name: str = ""
    id: int = 0
    name: str = ""
    external_url: str = ""
    available: bool = False
    latest_deployment: Deployment = field(default_factory=Deployment)
    output_sparse_status_metrics: bool = False

    def key(self) -> str:
        return _checksum(self.project_name + self.name)

    def default_labels_values(self) -> dict[str, str]:
        return {"project": self.project_name, "environment": self.name}

    def information_labels_values(self) -> dict[str, str]:
        deployment = self.latest_deployment
        labels = self.default_labels_values()
        labels.update(
            environment_id=str(self.id),
            external_url=self.external_url,
            kind=deployment.ref_kind.value if deployment.ref_kind else "",
            ref=deployment.ref_name,
            current_commit_short_id=deployment.commit_short_id,
            latest_commit_short_id="",
            available="true" if self.available else "false",
            username=deployment.username,
        )
        return labels


@dataclass
class Project:
    name: str
    topics: str = ""

    def key(self) -> str:
        return _checksum(self.name)


@dataclass
class Ref:
    """A ref of a project on which metrics are pulled regularly."""

    project: Project
    kind: RefKind
    name: str
    latest_pipeline: Pipeline = field(default_factory=Pipeline)
    latest_jobs: dict[str, Job] = field(default_factory=dict)

    def key(self) -> str:
        return _checksum(RefKind(self.kind).value + self.project.name + self.name)

    def default_labels_values(self) -> dict[str, str]:
        return {
            "kind": RefKind(self.kind).value,
            "project": self.project.name,
            "ref": self.name,
            "topics": self.project.topics,
            "variables": self.latest_pipeline.variables,
            "source": self.latest_pipeline.source,
        }


def get_ref_regexp(kind: RefKind | str, branches_regexp: str, tags_regexp: str) -> re.Pattern[str]:
    """Return the pattern refs of the given kind must match."""
    try:
        ref_kind = RefKind(kind)
    except ValueError:
        raise ValueError(f"invalid ref kind ({kind})") from None
    if ref_kind is RefKind.BRANCH:
        return re.compile(branches_regexp)
    if ref_kind is RefKind.TAG:
        return re.compile(tags_regexp)
    return re.compile(rf"^(?:{_MERGE_REQUEST_PATTERN})\Z", re.ASCII)


def merge_request_iid_from_ref_name(ref_name: str) -> str:
    """Extract a merge request IID from a ref name, raising ValueError if there is none."""
    match = re.fullmatch(_MERGE_REQUEST_PATTERN, ref_name, re.ASCII)
    if match:
        iid = match.group(1) or match.group(2)
        if iid:
            return iid
    raise ValueError(f"unable to extract the merge-request ID from the ref ({ref_name})")