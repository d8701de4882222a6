from __future__ import annotations

from sqlalchemy.orm import Session

from blog import models
from blog.seed import ensure_seed_data, pwd_context


def test_ensure_seed_data_is_idempotent(db: Session):
    ensure_seed_data()
    ensure_seed_data()

    admins = db.query(models.User).filter(models.User.username == "admin").all()
    assert len(admins) == 1
    admin = admins[0]
    assert admin.email == "admin@blog.local"
    assert admin.role == models.UserRole.ADMIN.value
    assert pwd_context.verify("changeme", admin.password_hash)

    categories = {
        c.slug: c.display_order
        for c in db.query(models.Category).filter(models.Category.slug.in_(["tech", "daily"]))
    }
    assert categories == {"tech": 1, "daily": 2}

    tag_slugs = {
        slug
        for (slug,) in db.query(models.Tag.slug).filter(
            models.Tag.slug.in_(["python", "fastapi", "postgresql"])
        )
    }
    assert tag_slugs == {"python", "fastapi", "postgresql"}
