from typing import List, Optional

from configs import db
from db.models.user import PermissionTemplate, User, UserGrant
from utils.auth import Grant


def get_user(user_id: int) -> Optional[User]:
    return db.session.get(User, int(user_id))


def grants_of(user: User) -> List[Grant]:
    return [
        Grant(g.template.code, g.resource_type, g.resource_id) for g in user.grants
    ]


def ensure_template(code: str, label: str) -> PermissionTemplate:
    tpl = PermissionTemplate.query.filter_by(code=code).first()
    if not tpl:
        tpl = PermissionTemplate(code=code, label=label)
        db.session.add(tpl)
        db.session.flush()
    return tpl


def grant(
    user: User,
    code: str,
    resource_type: str | None = None,
    resource_id: int | None = None,
) -> UserGrant:
    tpl = ensure_template(code, code.replace("_", " ").title())
    g = UserGrant(
        user=user,
        template=tpl,
        resource_type=resource_type,
        resource_id=resource_id,
    )
    db.session.add(g)
    return g
