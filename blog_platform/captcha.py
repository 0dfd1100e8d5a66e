"""
Math captcha for anonymous comments.

The answer lives in a signed cookie ``captcha_<id>`` so nothing is stored
server side. A challenge must be solved (``verify``) before a comment can
be posted with it, and posting consumes it.
"""
import json
import random
import time
import uuid

from django.core import signing

from .conf import blog_settings
from .exceptions import InvalidRequest

COOKIE_PREFIX = "captcha_"
SALT = "blog_platform.captcha"


def generate_problem(rng=random):
    """Return (question, answer) for a small arithmetic problem."""
    operation = rng.choice(["+", "-", "×"])
    if operation == "+":
        a, b = rng.randint(1, 10), rng.randint(1, 10)
        answer = a + b
    elif operation == "-":
        a = rng.randint(5, 14)
        b = rng.randint(1, a - 1)
        answer = a - b
    else:
        a, b = rng.randint(2, 6), rng.randint(2, 6)
        answer = a * b
    return f"{a} {operation} {b} = ?", answer


def cookie_name(challenge_id):
    return f"{COOKIE_PREFIX}{challenge_id}"


def store(response, challenge_id, state):
    response.set_signed_cookie(
        cookie_name(challenge_id),
        json.dumps(state),
        salt=SALT,
        max_age=blog_settings.CAPTCHA_MAX_AGE,
        httponly=True,
        secure=blog_settings.COMMENT_SESSION_COOKIE_SECURE,
        samesite="Lax",
    )


def new_challenge():
    """Return (challenge_id, question, state); persist state with ``store``."""
    question, answer = generate_problem()
    state = {
        "answer": answer,
        "expires": time.time() + blog_settings.CAPTCHA_MAX_AGE,
        "verified": False,
    }
    return str(uuid.uuid4()), question, state


def load(request, challenge_id):
    """
    Return the stored challenge state.

    Raises InvalidRequest if the cookie is missing, tampered with or expired.
    """
    try:
        raw = request.get_signed_cookie(
            cookie_name(challenge_id),
            salt=SALT,
            max_age=blog_settings.CAPTCHA_MAX_AGE,
        )
    except KeyError:
        raise InvalidRequest("CAPTCHA session not found or expired")
    except signing.SignatureExpired:
        raise InvalidRequest("CAPTCHA session expired")
    except signing.BadSignature:
        raise InvalidRequest("CAPTCHA session not found or expired")

    state = json.loads(raw)
    if time.time() > state["expires"]:
        raise InvalidRequest("CAPTCHA session expired")
    return state


def _matches(state, user_answer):
    try:
        return int(user_answer) == state["answer"]
    except (TypeError, ValueError):
        return False


def verify(request, response, challenge_id, user_answer):
    """Check an answer and mark the challenge verified on ``response``."""
    state = load(request, challenge_id)
    if not _matches(state, user_answer):
        raise InvalidRequest("Incorrect answer")
    state["verified"] = True
    store(response, challenge_id, state)


def consume(request, challenge_id, user_answer):
    """
    Validate a verified challenge for comment submission.

    The caller deletes the cookie with ``discard`` once the comment is
    accepted.
    """
    state = load(request, challenge_id)
    if not state.get("verified"):
        raise InvalidRequest("CAPTCHA not verified. Please solve the math problem first.")
    if not _matches(state, user_answer):
        raise InvalidRequest("Incorrect CAPTCHA answer")


def discard(response, challenge_id):
    response.delete_cookie(cookie_name(challenge_id), samesite="Lax")
