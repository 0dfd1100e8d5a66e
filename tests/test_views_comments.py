"""
Tests for the comment API endpoints.
"""
import json
import uuid
from datetime import timedelta

import pytest
from django.test import Client
from django.urls import reverse
from django.utils import timezone

from blog_platform import ledger
from blog_platform.models import Comment, CommentDeletionGrant, Post
from tests.conftest import post_json


def comment_url(comment_id):
    return reverse("blog_platform:comment_detail", kwargs={"comment_id": str(comment_id)})


def new_comment_payload(post, challenge, **overrides):
    challenge_id, answer = challenge
    payload = {
        "postId": post.pk,
        "content": "What a lovely article",
        "authorName": "Alice",
        "captchaSessionId": challenge_id,
        "captchaAnswer": answer,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def csrf_client():
    return Client(enforce_csrf_checks=True)


class TestCsrf:

    def test_session_endpoint_sets_csrf_cookie(self, db, csrf_client):
        csrf_client.get(reverse("blog_platform:comment_session"))
        assert "csrftoken" in csrf_client.cookies

    def test_owner_deletes_with_csrf_header(self, db, csrf_client, comment):
        session_id = csrf_client.get(reverse("blog_platform:comment_session")).json()["sessionId"]
        ledger.grant(session_id, comment.pk)
        token = csrf_client.cookies["csrftoken"].value

        response = csrf_client.delete(comment_url(comment.pk), HTTP_X_CSRFTOKEN=token)

        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_delete_without_csrf_header_is_rejected(self, db, csrf_client, comment):
        session_id = csrf_client.get(reverse("blog_platform:comment_session")).json()["sessionId"]
        ledger.grant(session_id, comment.pk)

        response = csrf_client.delete(comment_url(comment.pk))

        assert response.status_code == 403
        assert Comment.objects.visible().filter(pk=comment.pk).exists()

    def test_captcha_verify_with_csrf_header(self, db, csrf_client):
        url = reverse("blog_platform:math_captcha")
        challenge_id = csrf_client.get(url).json()["sessionId"]
        token = csrf_client.cookies["csrftoken"].value

        response = csrf_client.post(
            url,
            data=json.dumps({"sessionId": challenge_id, "userAnswer": -9999}),
            content_type="application/json",
            HTTP_X_CSRFTOKEN=token,
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Incorrect answer"}


class TestDeleteEndpoint:

    def test_scenario_owner_deletes_then_stranger_gets_404(self, db, client, comment):
        sess_1 = str(uuid.uuid4())
        sess_2 = str(uuid.uuid4())
        t0 = timezone.now() - timedelta(minutes=10)
        ledger.grant(sess_1, comment.pk, now=t0)

        client.cookies["comment_session"] = sess_1
        response = client.delete(comment_url(comment.pk))

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Comment deleted successfully"}
        comment.refresh_from_db()
        assert comment.deleted_at is not None
        assert not CommentDeletionGrant.objects.filter(session_id=sess_1).exists()

        client.cookies["comment_session"] = sess_2
        response = client.delete(comment_url(comment.pk))
        assert response.status_code == 404

    def test_admin_deletes_without_grant(self, db, client, comment, admin_user):
        client.force_login(admin_user)
        response = client.delete(comment_url(comment.pk))

        assert response.status_code == 200
        comment.refresh_from_db()
        assert comment.is_deleted

    def test_without_grant_is_403(self, db, client, comment, session_id):
        client.cookies["comment_session"] = session_id
        response = client.delete(comment_url(comment.pk))

        assert response.status_code == 403
        assert "error" in response.json()
        comment.refresh_from_db()
        assert not comment.is_deleted

    def test_expired_grant_is_403(self, db, client, comment, session_id):
        ledger.grant(session_id, comment.pk, now=timezone.now() - timedelta(minutes=31))
        client.cookies["comment_session"] = session_id

        assert client.delete(comment_url(comment.pk)).status_code == 403

    def test_malformed_id_is_400(self, db, client):
        assert client.delete(comment_url("not-a-uuid")).status_code == 400

    def test_unknown_id_is_404(self, db, client):
        assert client.delete(comment_url(uuid.uuid4())).status_code == 404

    def test_second_delete_is_404(self, db, client, comment, session_id):
        ledger.grant(session_id, comment.pk)
        client.cookies["comment_session"] = session_id

        assert client.delete(comment_url(comment.pk)).status_code == 200
        assert client.delete(comment_url(comment.pk)).status_code == 404


class TestCommentList:

    def test_requires_post_id(self, db, client):
        response = client.get(reverse("blog_platform:comment_list"))
        assert response.status_code == 400

    def test_lists_threads_and_deletable(self, db, client, post, comment, session_id):
        reply = Comment.objects.create(
            post=post, parent=comment, author_name="Bob", content="Agreed fully"
        )
        hidden = Comment.objects.create(post=post, author_name="Eve", content="Spam spam")
        Comment.objects.soft_delete(hidden.pk)
        ledger.grant(session_id, reply.pk)
        client.cookies["comment_session"] = session_id

        response = client.get(reverse("blog_platform:comment_list"), {"postId": post.pk})
        body = response.json()

        assert response.status_code == 200
        assert [c["id"] for c in body["comments"]] == [str(comment.pk)]
        assert [r["id"] for r in body["comments"][0]["replies"]] == [str(reply.pk)]
        assert body["userDeletableComments"] == [str(reply.pk)]
        assert body["pagination"]["total"] == 1
        assert body["pagination"]["totalPages"] == 1

    def test_pagination_newest_first(self, db, client, post):
        now = timezone.now()
        for minutes in range(3):
            Comment.objects.create(
                post=post,
                author_name="Bob",
                content=f"Comment {minutes}",
                created_at=now - timedelta(minutes=minutes),
            )

        response = client.get(
            reverse("blog_platform:comment_list"),
            {"postId": post.pk, "page": 2, "limit": 2},
        )
        body = response.json()

        assert [c["content"] for c in body["comments"]] == ["Comment 2"]
        assert body["pagination"]["hasPrev"] is True
        assert body["pagination"]["hasNext"] is False

    def test_listing_sweeps_expired_grants(self, db, client, post, comment, session_id):
        ledger.grant(session_id, comment.pk, now=timezone.now() - timedelta(hours=1))

        client.get(reverse("blog_platform:comment_list"), {"postId": post.pk})

        assert CommentDeletionGrant.objects.count() == 0


class TestCreateComment:

    def test_create_grants_deletion_rights(self, db, client, post, solved_captcha):
        response = post_json(
            client,
            reverse("blog_platform:comment_list"),
            new_comment_payload(post, solved_captcha),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        comment = Comment.objects.get(pk=body["comment"]["id"])
        assert comment.author_name == "Alice"
        assert comment.ip_address != "127.0.0.1"
        assert len(comment.ip_address) == 64

        session_id = client.cookies["comment_session"].value
        assert ledger.check(session_id, comment.pk)

        delete = client.delete(comment_url(comment.pk))
        assert delete.status_code == 200

    def test_captcha_is_single_use(self, db, client, post, solved_captcha):
        url = reverse("blog_platform:comment_list")
        payload = new_comment_payload(post, solved_captcha)

        assert post_json(client, url, payload).status_code == 200
        assert post_json(client, url, payload).status_code == 400

    def test_unverified_captcha(self, db, client, post, monkeypatch):
        from blog_platform import captcha

        monkeypatch.setattr(captcha, "generate_problem", lambda: ("1 + 1 = ?", 2))
        challenge_id = client.get(reverse("blog_platform:math_captcha")).json()["sessionId"]

        response = post_json(
            client,
            reverse("blog_platform:comment_list"),
            new_comment_payload(post, (challenge_id, 2)),
        )
        assert response.status_code == 400
        assert "not verified" in response.json()["error"]

    def test_missing_fields(self, db, client, post):
        response = post_json(client, reverse("blog_platform:comment_list"), {"postId": post.pk})
        assert response.status_code == 400
        assert response.json()["error"] == "All fields are required"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"content": "hey"},
            {"content": "x" * 501},
            {"authorName": "A"},
            {"authorName": "A" * 31},
        ],
    )
    def test_length_limits(self, db, client, post, solved_captcha, overrides):
        response = post_json(
            client,
            reverse("blog_platform:comment_list"),
            new_comment_payload(post, solved_captcha, **overrides),
        )
        assert response.status_code == 400

    def test_draft_post_is_404(self, db, client, solved_captcha):
        draft = Post.objects.create(title="Draft", content="WIP")
        response = post_json(
            client,
            reverse("blog_platform:comment_list"),
            new_comment_payload(draft, solved_captcha),
        )
        assert response.status_code == 404

    def test_reply_parent_must_belong_to_post(self, db, client, post, solved_captcha):
        other = Post.objects.create(title="Other", content="x", status=Post.STATUS_PUBLISHED)
        foreign = Comment.objects.create(post=other, author_name="Bob", content="Elsewhere")

        response = post_json(
            client,
            reverse("blog_platform:comment_list"),
            new_comment_payload(post, solved_captcha, parentId=str(foreign.pk)),
        )
        assert response.status_code == 400

    def test_reply(self, db, client, post, comment, solved_captcha):
        response = post_json(
            client,
            reverse("blog_platform:comment_list"),
            new_comment_payload(post, solved_captcha, parentId=str(comment.pk)),
        )
        assert response.status_code == 200
        assert response.json()["comment"]["parent_id"] == str(comment.pk)

    def test_rate_limited(self, db, client, settings, post, solved_captcha):
        settings.BLOG_PLATFORM = {**settings.BLOG_PLATFORM, "COMMENT_RATE_LIMIT": 1}

        response = post_json(
            client,
            reverse("blog_platform:comment_list"),
            new_comment_payload(post, solved_captcha),
        )
        assert response.status_code == 200

        from blog_platform import captcha

        challenge_id = client.get(reverse("blog_platform:math_captcha")).json()["sessionId"]
        post_json(
            client,
            reverse("blog_platform:math_captcha"),
            {"sessionId": challenge_id, "userAnswer": 7},
        )
        response = post_json(
            client,
            reverse("blog_platform:comment_list"),
            new_comment_payload(post, (challenge_id, 7)),
        )
        assert response.status_code == 429
        assert captcha.cookie_name(challenge_id) in client.cookies

    def test_invalid_json(self, db, client):
        response = client.post(
            reverse("blog_platform:comment_list"),
            data="{not json",
            content_type="application/json",
        )
        assert response.status_code == 400


class TestMathCaptcha:

    def test_wrong_answer(self, db, client, monkeypatch):
        from blog_platform import captcha

        monkeypatch.setattr(captcha, "generate_problem", lambda: ("2 × 3 = ?", 6))
        issued = client.get(reverse("blog_platform:math_captcha")).json()
        assert issued["question"] == "2 × 3 = ?"

        response = post_json(
            client,
            reverse("blog_platform:math_captcha"),
            {"sessionId": issued["sessionId"], "userAnswer": "5"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Incorrect answer"

    def test_unknown_challenge(self, db, client):
        response = post_json(
            client,
            reverse("blog_platform:math_captcha"),
            {"sessionId": str(uuid.uuid4()), "userAnswer": 1},
        )
        assert response.status_code == 400

    def test_tampered_cookie(self, db, client):
        challenge_id = str(uuid.uuid4())
        client.cookies[f"captcha_{challenge_id}"] = json.dumps({"answer": 1, "verified": True})

        response = post_json(
            client,
            reverse("blog_platform:math_captcha"),
            {"sessionId": challenge_id, "userAnswer": 1},
        )
        assert response.status_code == 400

    def test_generated_problems_are_consistent(self):
        from blog_platform.captcha import generate_problem

        for _ in range(50):
            question, answer = generate_problem()
            a, op, b = question.split()[:3]
            expected = {"+": int(a) + int(b), "-": int(a) - int(b), "×": int(a) * int(b)}[op]
            assert answer == expected
            assert answer > 0


class TestReactions:

    def reactions_url(self, comment):
        return reverse("blog_platform:comment_reactions", kwargs={"comment_id": str(comment.pk)})

    def test_toggle_flow(self, db, client, comment):
        url = self.reactions_url(comment)

        added = post_json(client, url, {"reactionType": "like"}).json()
        assert added["action"] == "added"
        assert client.get(url).json()["reactions"] == {"like": 1, "dislike": 0}

        updated = post_json(client, url, {"reactionType": "dislike"}).json()
        assert updated["action"] == "updated"
        assert client.get(url).json()["reactions"] == {"like": 0, "dislike": 1}

        removed = post_json(client, url, {"reactionType": "dislike"}).json()
        assert removed["action"] == "removed"
        assert client.get(url).json()["reactions"] == {"like": 0, "dislike": 0}

    def test_invalid_type(self, db, client, comment):
        response = post_json(client, self.reactions_url(comment), {"reactionType": "love"})
        assert response.status_code == 400

    def test_delete(self, db, client, comment):
        url = self.reactions_url(comment)
        post_json(client, url, {"reactionType": "like"})

        assert client.delete(url).status_code == 200
        assert comment.reactions.count() == 0

    def test_reactions_are_per_ip(self, db, client, comment):
        url = self.reactions_url(comment)
        post_json(client, url, {"reactionType": "like"})
        client.post(
            url,
            data=json.dumps({"reactionType": "like"}),
            content_type="application/json",
            HTTP_X_FORWARDED_FOR="203.0.113.9, 10.0.0.1",
        )
        assert client.get(url).json()["reactions"]["like"] == 2
