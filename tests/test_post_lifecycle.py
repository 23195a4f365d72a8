"""
Post lifecycle tests
Model-level transitions, guards and derived fields
"""

import re
from datetime import datetime

import pytest

from blog_api.core.exceptions import InvalidStatusTransition, ValidationFailed
from blog_api.models.post import (
    Post,
    PostStatus,
    make_excerpt,
    slugify_title,
    unique_slug,
    validate_rejection_reason,
)

REASON = "Needs more sources and a clearer intro."


def build_post(status: PostStatus = PostStatus.DRAFT, **fields) -> Post:
    fields.setdefault("title", "A post")
    fields.setdefault("content", "word " * 20)
    return Post(status=status, is_published=status == PostStatus.PUBLISHED, **fields)


class TestSubmit:
    def test_draft_becomes_pending(self):
        post = build_post()
        now = datetime(2024, 5, 1, 12, 0, 0)

        post.submit_for_approval(now=now)

        assert post.status == PostStatus.PENDING
        assert post.submitted_for_approval is True
        assert post.submitted_at == now

    @pytest.mark.parametrize("status", [
        PostStatus.PENDING, PostStatus.PUBLISHED, PostStatus.REJECTED, PostStatus.ARCHIVED,
    ])
    def test_only_drafts_can_be_submitted(self, status):
        post = build_post(status)

        with pytest.raises(InvalidStatusTransition) as exc_info:
            post.submit_for_approval()

        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "Only draft posts can be submitted for approval"
        assert exc_info.value.current_status == status.value
        assert post.status == status, "A rejected transition must not change the status"


class TestApprove:
    def test_pending_becomes_published(self):
        post = build_post(PostStatus.PENDING, rejection_reason="old reason from before")
        now = datetime(2024, 5, 2, 9, 30, 0)

        post.approve(admin_id=42, now=now)

        assert post.status == PostStatus.PUBLISHED
        assert post.is_published is True
        assert post.is_approved is True
        assert post.approved_by_id == 42
        assert post.approved_at == now
        assert post.published_at == now
        assert post.rejection_reason is None

    @pytest.mark.parametrize("status", [PostStatus.DRAFT, PostStatus.PUBLISHED, PostStatus.REJECTED])
    def test_only_pending_can_be_approved(self, status):
        post = build_post(status)
        with pytest.raises(InvalidStatusTransition, match="Only pending posts can be approved"):
            post.approve(admin_id=1)


class TestReject:
    def test_pending_becomes_rejected(self):
        post = build_post(PostStatus.PENDING)

        post.reject(admin_id=3, reason=f"  {REASON}  ")

        assert post.status == PostStatus.REJECTED
        assert post.is_approved is False
        assert post.approved_by_id == 3
        assert post.approved_at is not None
        assert post.rejection_reason == REASON, "Reason is stored trimmed"

    @pytest.mark.parametrize("reason", [None, "", "too short", "   short   ", "x" * 501])
    def test_reason_length_is_validated(self, reason):
        post = build_post(PostStatus.PENDING)

        with pytest.raises(ValidationFailed) as exc_info:
            post.reject(admin_id=3, reason=reason)

        assert exc_info.value.details[0]["field"] == "reason"
        assert post.status == PostStatus.PENDING

    def test_reason_checked_before_status(self):
        post = build_post(PostStatus.DRAFT)
        with pytest.raises(ValidationFailed):
            post.reject(admin_id=3, reason="short")

    def test_only_pending_can_be_rejected(self):
        post = build_post(PostStatus.PUBLISHED)
        with pytest.raises(InvalidStatusTransition, match="Only pending posts can be rejected"):
            post.reject(admin_id=3, reason=REASON)

    def test_reason_boundaries(self):
        assert validate_rejection_reason("x" * 10) == "x" * 10
        assert validate_rejection_reason("x" * 500) == "x" * 500


class TestArchiveAndRevise:
    def test_published_can_be_archived(self):
        post = build_post(PostStatus.PUBLISHED)
        post.archive()
        assert post.status == PostStatus.ARCHIVED
        assert post.is_published is False

    def test_draft_cannot_be_archived(self):
        with pytest.raises(InvalidStatusTransition, match="Only published posts can be archived"):
            build_post().archive()

    def test_rejected_returns_to_draft(self):
        post = build_post(PostStatus.PENDING)
        post.reject(admin_id=3, reason=REASON)

        post.return_to_draft()

        assert post.status == PostStatus.DRAFT
        assert post.submitted_for_approval is False
        assert post.submitted_at is None
        assert post.approved_by_id is None
        assert post.rejection_reason is None

    def test_full_cycle_after_revision(self):
        post = build_post()
        post.submit_for_approval()
        post.reject(admin_id=1, reason=REASON)
        post.return_to_draft()
        post.submit_for_approval()
        post.approve(admin_id=1)
        assert post.status == PostStatus.PUBLISHED

    def test_only_rejected_can_be_revised(self):
        with pytest.raises(InvalidStatusTransition):
            build_post(PostStatus.PUBLISHED).return_to_draft()


class TestDerivedFields:
    @pytest.mark.parametrize("words,minutes", [(0, 0), (1, 1), (200, 1), (201, 2), (450, 3)])
    def test_reading_time(self, words, minutes):
        post = build_post(content=" ".join(["word"] * words))
        assert post.reading_time == minutes

    def test_excerpt_truncates_content(self):
        content = "a" * 400
        assert make_excerpt(content) == "a" * 150 + "..."

    def test_excerpt_of_short_content(self):
        assert make_excerpt("short body") == "short body..."

    def test_excerpt_filled_on_insert(self, make_post, author):
        post = make_post(author, content="b" * 200)
        assert post.excerpt == "b" * 150 + "..."

    def test_explicit_excerpt_is_kept(self, make_post, author):
        post = make_post(author, excerpt="Hand written summary")
        assert post.excerpt == "Hand written summary"


class TestSlugs:
    @pytest.mark.parametrize("title,slug", [
        ("Hello World", "hello-world"),
        ("Hello, World!", "hello-world"),
        ("  Many   spaces  here ", "many-spaces-here"),
        ("Already-hyphenated title", "already-hyphenated-title"),
    ])
    def test_slugify_title(self, title, slug):
        assert slugify_title(title) == slug

    def test_unique_slug_has_suffix(self):
        slug = unique_slug("Hello World")
        assert re.fullmatch(r"hello-world-\d{13}-[0-9a-f]{4}", slug), slug

    def test_unique_slugs_differ(self):
        assert unique_slug("Same title") != unique_slug("Same title")

    def test_unique_slug_for_symbol_only_title(self):
        assert unique_slug("!!!").startswith("post-")
