"""Ref model, current-ref resolution and recent branch enumeration.

Everything here is read-only: each call asks git for the live state
of the repository and builds fresh Ref values from its output.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from gitrefs.git.utils import (
    GitCommandError,
    GitOutputParseError,
    GitRunner,
    NoCommitsError,
    NoUpstreamError,
    RefNotFoundError,
    config_get,
    run_git,
)

logger = logging.getLogger(__name__)

_SHA_RE = re.compile(r"^(?:[0-9a-f]{40}|[0-9a-f]{64})$")

# %(committerdate:raw) is "<epoch> <tz offset>"
REF_DATE_FORMAT = "%(refname) %(objectname) %(committerdate:raw)"


class RefType(str, Enum):
    LOCAL_BRANCH = "local_branch"
    REMOTE_BRANCH = "remote_branch"
    TAG = "tag"
    OTHER = "other"


@dataclass(frozen=True)
class Ref:
    """A named pointer to a commit."""
    name: str
    type: RefType
    sha: str


@dataclass(frozen=True)
class RefDateCommit:
    """A ref and the commit time of its tip, used for recency filtering."""
    ref: Ref
    date: datetime


def parse_ref_to_type_and_name(full_ref: str) -> Tuple[RefType, str]:
    """Classify a fully-qualified ref and return its short name.

    Examples:
        refs/heads/master          -> (LOCAL_BRANCH, "master")
        refs/remotes/origin/master -> (REMOTE_BRANCH, "origin/master")
        refs/tags/v1.0             -> (TAG, "v1.0")
        HEAD                       -> (OTHER, "HEAD")
    """
    for prefix, ref_type in (
        ("refs/heads/", RefType.LOCAL_BRANCH),
        ("refs/remotes/", RefType.REMOTE_BRANCH),
        ("refs/tags/", RefType.TAG),
    ):
        if full_ref.startswith(prefix):
            return ref_type, full_ref[len(prefix):]
    return RefType.OTHER, full_ref


def is_sha(value: str) -> bool:
    """True for a full SHA-1 or SHA-256 object id."""
    return bool(_SHA_RE.match(value))


# =============================================================================
# Resolution
# =============================================================================


def _is_unknown_ref(ref: str, cwd: Optional[Path], runner: GitRunner) -> bool:
    # --verify -q exits 1 silently only when the revision is missing;
    # anything else (not a repository, bad cwd) prints a fatal error
    result = runner("rev-parse", "--verify", "-q", ref, cwd=cwd)
    return result.returncode == 1 and not result.stderr.strip()


def resolve_ref(
    ref: str,
    cwd: Optional[Path] = None,
    runner: Optional[GitRunner] = None,
) -> Ref:
    """Resolve any revision to a Ref.

    Args:
        ref: Branch, tag, remote ref, full ref path or commit id
        cwd: Repository path

    Returns:
        Ref with its current commit id. A revision without a symbolic
        name (a raw sha, a detached HEAD) becomes an OTHER ref named
        by its sha.

    Raises:
        RefNotFoundError: If the revision does not exist
        GitCommandError: If git fails for any other reason (e.g. cwd
            is not a repository)
    """
    runner = runner or run_git
    try:
        result = runner("rev-parse", ref, "--symbolic-full-name", ref, cwd=cwd, check=True)
    except GitCommandError as e:
        if _is_unknown_ref(ref, cwd, runner):
            raise RefNotFoundError(f"Git can't resolve ref: {ref!r}", ref=ref) from e
        raise

    lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
    if not lines:
        raise RefNotFoundError(f"Git can't resolve ref: {ref!r}", ref=ref)

    sha = lines[0]
    if not is_sha(sha):
        raise GitOutputParseError(f"Expected a commit id resolving {ref!r}, got {sha!r}", line=sha)

    # Detached HEAD reports its symbolic name as plain "HEAD"
    if len(lines) == 1 or lines[1] == "HEAD":
        return Ref(sha, RefType.OTHER, sha)

    ref_type, name = parse_ref_to_type_and_name(lines[1])
    return Ref(name, ref_type, sha)


def resolve_refs(
    refs: Iterable[str],
    cwd: Optional[Path] = None,
    runner: Optional[GitRunner] = None,
) -> List[Ref]:
    """Resolve several revisions, failing on the first unresolvable one."""
    return [resolve_ref(ref, cwd=cwd, runner=runner) for ref in refs]


def current_ref(cwd: Optional[Path] = None, runner: Optional[GitRunner] = None) -> Ref:
    """Get the Ref that is currently checked out.

    Raises:
        NoCommitsError: If HEAD cannot be resolved (e.g. no commits yet)
        GitCommandError: If cwd is not inside a repository
    """
    try:
        return resolve_ref("HEAD", cwd=cwd, runner=runner)
    except (RefNotFoundError, GitOutputParseError) as e:
        raise NoCommitsError(
            "Unable to resolve HEAD; the repository may have no commits yet",
            ref="HEAD",
        ) from e


def remote_for_branch(
    branch: str,
    cwd: Optional[Path] = None,
    runner: Optional[GitRunner] = None,
) -> str:
    """Configured remote of a local branch, "" when none."""
    return config_get(f"branch.{branch}.remote", cwd=cwd, runner=runner)


def remote_branch_for_local_branch(
    branch: str,
    cwd: Optional[Path] = None,
    runner: Optional[GitRunner] = None,
) -> str:
    """Name of the remote branch a local branch tracks.

    The upstream may have a different name from the local branch;
    when branch.<name>.merge is unset the local name is assumed.

    Raises:
        NoUpstreamError: If branch.<name>.merge names something other
            than a branch on the remote
    """
    merge = config_get(f"branch.{branch}.merge", cwd=cwd, runner=runner)
    if not merge:
        return branch
    if not merge.startswith("refs/heads/"):
        raise NoUpstreamError(
            f"Upstream of branch {branch!r} is not a remote branch: {merge!r}",
            ref=branch,
        )
    return merge[len("refs/heads/"):]


def _upstream_for_current_branch(
    cwd: Optional[Path],
    runner: Optional[GitRunner],
) -> Tuple[str, str]:
    ref = current_ref(cwd=cwd, runner=runner)
    if ref.type != RefType.LOCAL_BRANCH:
        raise NoUpstreamError(f"HEAD is not on a local branch ({ref.name})", ref=ref.name)

    remote = remote_for_branch(ref.name, cwd=cwd, runner=runner)
    if not remote:
        raise NoUpstreamError(f"No upstream configured for branch {ref.name!r}", ref=ref.name)
    return remote, remote_branch_for_local_branch(ref.name, cwd=cwd, runner=runner)


def remote_ref_name_for_current_branch(
    cwd: Optional[Path] = None,
    runner: Optional[GitRunner] = None,
) -> str:
    """Get "<remote>/<branch>" for the current branch's upstream.

    Raises:
        NoUpstreamError: If no upstream is configured
    """
    remote, branch = _upstream_for_current_branch(cwd, runner)
    return f"{remote}/{branch}"


def remote_for_current_branch(
    cwd: Optional[Path] = None,
    runner: Optional[GitRunner] = None,
) -> str:
    """Get the remote name of the current branch's upstream."""
    remote, _ = _upstream_for_current_branch(cwd, runner)
    return remote


def current_remote_ref(cwd: Optional[Path] = None, runner: Optional[GitRunner] = None) -> Ref:
    """Resolve the current branch's upstream to a remote Ref.

    Raises:
        NoUpstreamError: If no upstream is configured
        RefNotFoundError: If the upstream ref does not exist locally
    """
    name = remote_ref_name_for_current_branch(cwd=cwd, runner=runner)
    ref = resolve_ref(name, cwd=cwd, runner=runner)
    if ref.type != RefType.REMOTE_BRANCH:
        raise RefNotFoundError(f"Upstream {name!r} is not a remote-tracking branch", ref=name)
    return ref


def local_refs(cwd: Optional[Path] = None, runner: Optional[GitRunner] = None) -> List[Ref]:
    """List local branches and tags.

    Returns:
        Refs in git's listing order; empty for a repository without commits
    """
    runner = runner or run_git
    result = runner("show-ref", "--heads", "--tags", cwd=cwd)
    # show-ref exits 1 when there is nothing to show
    if result.returncode == 1 and not result.stdout.strip():
        return []
    if result.returncode != 0:
        raise GitCommandError(
            f"Git command failed (exit {result.returncode}): git show-ref --heads --tags\n{result.stderr}",
            returncode=result.returncode,
            stderr=result.stderr,
            command="git show-ref --heads --tags",
        )

    refs = []
    for line in result.stdout.splitlines():
        if not line.strip():
            continue
        parts = line.split()
        if len(parts) != 2 or not is_sha(parts[0]):
            raise GitOutputParseError(f"Malformed show-ref line: {line!r}", line=line)
        ref_type, name = parse_ref_to_type_and_name(parts[1])
        refs.append(Ref(name, ref_type, parts[0]))
    return refs


def remote_list(cwd: Optional[Path] = None, runner: Optional[GitRunner] = None) -> List[str]:
    """Names of the configured remotes."""
    runner = runner or run_git
    result = runner("remote", cwd=cwd, check=True)
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


# =============================================================================
# Recent branches
# =============================================================================


def _parse_ref_date_line(line: str) -> RefDateCommit:
    parts = line.split()
    if len(parts) != 4 or not is_sha(parts[1]):
        raise GitOutputParseError(f"Malformed ref listing line: {line!r}", line=line)
    full_ref, sha, epoch, _offset = parts
    try:
        date = datetime.fromtimestamp(int(epoch), tz=timezone.utc)
    except ValueError:
        raise GitOutputParseError(f"Invalid commit timestamp in line: {line!r}", line=line) from None
    ref_type, name = parse_ref_to_type_and_name(full_ref)
    return RefDateCommit(Ref(name, ref_type, sha), date)


def _list_ref_dates(
    namespace: str,
    cwd: Optional[Path],
    runner: GitRunner,
) -> List[RefDateCommit]:
    result = runner("for-each-ref", f"--format={REF_DATE_FORMAT}", namespace, cwd=cwd, check=True)
    entries = []
    for line in result.stdout.splitlines():
        if not line.strip():
            continue
        entry = _parse_ref_date_line(line)
        # refs/remotes/<remote>/HEAD is an alias, not a branch
        if entry.ref.type == RefType.REMOTE_BRANCH and entry.ref.name.split("/", 1)[-1] == "HEAD":
            logger.debug("Skipping symbolic remote ref %s", entry.ref.name)
            continue
        entries.append(entry)
    return entries


def _as_aware(value: datetime) -> datetime:
    # naive datetimes are taken as local time
    if value.tzinfo is None:
        return value.astimezone()
    return value


def recent_branches(
    since: datetime,
    include_remotes: bool = False,
    only_remote: str = "",
    cwd: Optional[Path] = None,
    runner: Optional[GitRunner] = None,
) -> List[Ref]:
    """List branches whose tip commit is no older than `since`.

    Local branches are listed first, then (optionally) remote-tracking
    branches. The result is ordered by commit date, newest first; refs
    with the same date keep that enumeration order. Tags are never
    included.

    Args:
        since: Cutoff; branches with older tip commits are dropped
        include_remotes: Also list remote-tracking branches
        only_remote: Restrict remote branches to this remote
        cwd: Repository path

    Returns:
        List of Ref, newest first
    """
    runner = runner or run_git
    cutoff = _as_aware(since)

    entries = _list_ref_dates("refs/heads", cwd, runner)
    if include_remotes:
        namespace = f"refs/remotes/{only_remote}" if only_remote else "refs/remotes"
        entries.extend(_list_ref_dates(namespace, cwd, runner))

    recent = [e for e in entries if e.date >= cutoff]
    logger.debug("%d of %d branches since %s", len(recent), len(entries), cutoff.isoformat())

    # sorted() is stable, so equal dates keep enumeration order
    recent = sorted(recent, key=lambda e: e.date, reverse=True)

    refs = []
    seen = set()
    for entry in recent:
        key = (entry.ref.name, entry.ref.type)
        if key in seen:
            continue
        seen.add(key)
        refs.append(entry.ref)
    return refs
