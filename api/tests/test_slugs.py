"""Test slug generation and uniqueness."""

from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from blog import schemas
from blog.services import post_mutation
from blog.utils.slugs import generate_slug, generate_unique_slug, is_slug_taken

from .conftest import unique_name


@pytest.mark.parametrize(
    "title, slug",
    [
        ("Hello World!", "hello-world"),
        ("Is this it? Yes.", "is-this-it-yes"),
        ("One, two, three", "one-two-three"),
        ("C# & F#", "c#-&-f#"),
        ("안녕 세상", "안녕-세상"),
        ("Trailing space ", "trailing-space-"),
    ],
)
def test_generate_slug(title, slug):
    assert generate_slug(title) == slug


def test_generate_unique_slug_appends_counter(db: Session, make_user):
    user = make_user()
    title = unique_name("Crowded Title")
    base = generate_slug(title)

    for _ in range(3):
        post_mutation.create_post(db, schemas.PostCreate(title=title, content="x"), user.id)

    assert is_slug_taken(db, base)
    assert is_slug_taken(db, f"{base}-2")
    assert generate_unique_slug(db, title) == f"{base}-3"


def test_generate_unique_slug_ignores_excluded_post(db: Session, make_user):
    user = make_user()
    title = unique_name("Own Title")
    post = post_mutation.create_post(db, schemas.PostCreate(title=title, content="x"), user.id)

    assert generate_unique_slug(db, title, exclude_post_id=post.id) == post.slug
    assert generate_unique_slug(db, title) == f"{post.slug}-1"


def test_deleted_post_slug_is_not_taken(db: Session, make_user):
    user = make_user()
    post = post_mutation.create_post(
        db, schemas.PostCreate(title=unique_name("Gone"), content="x"), user.id
    )
    post_mutation.delete_post(db, post.id, user.id)

    assert not is_slug_taken(db, post.slug)
