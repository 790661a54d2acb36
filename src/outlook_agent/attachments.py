"""Attachment path validation.

Every path is canonicalized before it is checked, so a relative spelling,
``..`` segments or a symlink cannot place a file outside the allowed roots.
"""

import logging
import os
import stat
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from outlook_agent.errors import AttachmentAccessError, ValidationError

DEFAULT_MAX_ATTACHMENT_BYTES = 10 * 1024 * 1024  # 10 MiB

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttachmentRef:
    """A checked attachment path."""

    requested: str
    resolved: str
    size: int
    allowed: bool
    reason: str = ""

    def __str__(self) -> str:
        return self.resolved


def canonicalize(path: str | os.PathLike[str], cwd: str | None = None) -> str:
    """Resolve a path against cwd and through any symlinks.

    Falls back to the absolute path when resolution fails (for example a
    broken link); the existence check catches that case afterwards.
    """
    absolute = os.path.join(cwd or os.getcwd(), os.fspath(path))
    try:
        return os.path.realpath(absolute, strict=True)
    except OSError:
        return os.path.normpath(absolute)


def is_under_root(root: str, target: str) -> bool:
    """Check that target is root itself or a descendant of it."""
    rel = os.path.relpath(target, root)
    return rel == "." or not (rel == ".." or rel.startswith(".." + os.sep) or os.path.isabs(rel))


class PathGuard:
    """Validates attachment paths against allowed roots and a size limit."""

    def __init__(
        self,
        allowed_roots: Sequence[str | os.PathLike[str]] | None = None,
        max_bytes: int = DEFAULT_MAX_ATTACHMENT_BYTES,
        *,
        cwd: str | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.cwd = cwd or os.getcwd()
        roots = list(allowed_roots) if allowed_roots else [self.cwd]
        self.allowed_roots = [canonicalize(root, self.cwd) for root in roots]
        self.max_bytes = max_bytes
        self.log = log or logger

    def check(self, candidate: str | os.PathLike[str]) -> AttachmentRef:
        """
        Validate a single attachment path.

        Args:
            candidate: Path as given by the caller, absolute or relative to cwd.

        Returns:
            An allowed AttachmentRef.

        Raises:
            AttachmentAccessError: If the path does not exist or is unreadable.
            ValidationError: If it is not a regular file, is too large, or
                lies outside every allowed root.
        """
        requested = os.fspath(candidate)
        resolved = canonicalize(requested, self.cwd)

        try:
            st = os.stat(resolved)
        except OSError as e:
            raise AttachmentAccessError(
                f"Attachment not accessible: {resolved}. {e.strerror or e}"
            ) from e

        if not stat.S_ISREG(st.st_mode):
            raise ValidationError(f"Attachment is not a file: {resolved}")

        if not os.access(resolved, os.R_OK):
            raise AttachmentAccessError(f"Attachment not readable: {resolved}")

        if st.st_size > self.max_bytes:
            raise ValidationError(
                f"Attachment too large ({st.st_size} bytes, limit {self.max_bytes}): {resolved}"
            )

        if not any(is_under_root(root, resolved) for root in self.allowed_roots):
            raise ValidationError(
                f"Attachment path not allowed: {resolved}. "
                f"Allowed roots: {', '.join(self.allowed_roots)}"
            )

        return AttachmentRef(
            requested=requested,
            resolved=resolved,
            size=st.st_size,
            allowed=True,
        )

    def validate(self, candidates: Iterable[str | os.PathLike[str]] | None) -> list[AttachmentRef]:
        """
        Validate a batch of attachment paths, failing on the first violation.

        Returns:
            AttachmentRefs in input order. Nothing is returned for a batch
            containing any rejected path.
        """
        refs = []
        for candidate in candidates or []:
            try:
                refs.append(self.check(candidate))
            except ValidationError as e:
                self.log.warning("Rejected attachment %r: %s", os.fspath(candidate), e)
                raise
        if refs:
            self.log.info("Validated %d attachment(s)", len(refs))
        return refs

