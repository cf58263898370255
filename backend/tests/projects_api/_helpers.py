from datetime import datetime, timezone
from uuid import uuid4

from codeplay.core.security import create_access_token
from codeplay.db.postgres.models.identity import User
from codeplay.db.postgres.models.playgrounds import Playground, PlaygroundTemplateKind, TemplateFile
from codeplay.services.playground_templates import build_template_files


async def seed_user(db_session, *, email=None):
    user = User(email=email or f"owner-{uuid4().hex[:8]}@example.com", name="Owner", email_verified=True)
    db_session.add(user)
    await db_session.commit()
    return user


def user_headers(user) -> dict[str, str]:
    token = create_access_token(subject=str(user.id), email=user.email)
    return {"Authorization": f"Bearer {token}"}


async def seed_playground(
    db_session,
    owner,
    *,
    title="Seeded Project",
    description=None,
    template=PlaygroundTemplateKind.REACT,
    content=None,
    created_at=None,
):
    playground = Playground(
        title=title,
        description=description,
        template=template,
        user_id=owner.id,
    )
    if created_at is not None:
        playground.created_at = created_at
        playground.updated_at = created_at
    playground.template_files = TemplateFile(
        content=content if content is not None else build_template_files(template.value)
    )
    db_session.add(playground)
    await db_session.commit()
    return playground


def at(day: int) -> datetime:
    return datetime(2026, 1, day, 12, 0, tzinfo=timezone.utc)
